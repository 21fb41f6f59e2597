"""Thread primitives, compact character storage, display-width helpers and shell command helpers."""