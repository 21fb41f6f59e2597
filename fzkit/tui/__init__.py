"""Key and mouse events, borders, colour themes, and the inline ANSI renderer and its windows."""