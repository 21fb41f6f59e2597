import threading

from fzkit.util.atomicbool import AtomicBool


def test_initial_value():
    assert AtomicBool(True).value is True
    assert AtomicBool(False).value is False


def test_set_returns_new_state_and_updates():
    ab = AtomicBool(True)
    assert ab.set(False) is False
    assert ab.value is False
    assert ab.set(True) is True
    assert ab.value is True


def test_bool_conversion_follows_value():
    ab = AtomicBool(False)
    assert not ab
    ab.set(True)
    assert ab


def test_concurrent_setters_leave_a_valid_state():
    ab = AtomicBool(False)
    threads = [threading.Thread(target=ab.set, args=(i % 2 == 0,)) for i in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert ab.value in (True, False)
    ab.set(True)
    assert ab.value is True