import pytest

from socialnav.simple_queue import SimpleQueue


def test_string_keys_with_priority_update():
    frontier = SimpleQueue()
    frontier.push("a-key", 7.0)
    frontier.push("b-key", 3.0)
    frontier.push("b-key", 3.0)
    assert len(frontier) == 2
    assert frontier.pop() == "b-key"
    frontier.push("c-key", 5.0)
    assert frontier.pop() == "c-key"
    assert frontier.pop() == "a-key"
    assert not frontier
    assert len(frontier) == 0


def test_integer_ids_priority_lowered():
    queue = SimpleQueue()
    queue.push(42, 2.3)
    queue.push(43, 2.2)
    queue.push(42, 2.1)
    assert queue.pop() == 42
    assert queue.pop() == 43


def test_pop_empty_raises():
    with pytest.raises(IndexError):
        SimpleQueue().pop()


def test_exists_and_contains():
    queue = SimpleQueue()
    queue.push("x", 1.0)
    assert queue.exists("x")
    assert "x" in queue
    assert not queue.exists("y")


def test_clear_empties_queue():
    queue = SimpleQueue()
    for i, p in enumerate([5.0, 1.0, 3.0]):
        queue.push(i, p)
    queue.clear()
    assert len(queue) == 0
    with pytest.raises(IndexError):
        queue.pop()


def test_pops_in_ascending_priority_order():
    queue = SimpleQueue()
    priorities = {"a": 4.0, "b": -1.0, "c": 2.5, "d": 10.0, "e": 0.0}
    for key, p in priorities.items():
        queue.push(key, p)
    popped = [queue.pop() for _ in range(len(priorities))]
    assert popped == sorted(priorities, key=priorities.get)