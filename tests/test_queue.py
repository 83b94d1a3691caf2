from ossim.common import Pcb
from ossim.queue import MAX_QUEUE_SIZE, ProcessQueue


def test_fifo_order():
    q = ProcessQueue()
    procs = [Pcb(pid=i) for i in range(3)]
    for p in procs:
        q.enqueue(p)
    assert [q.dequeue() for _ in range(3)] == procs


def test_empty_queue():
    q = ProcessQueue()
    assert q.empty()
    assert q.dequeue() is None
    q.enqueue(Pcb())
    assert not q.empty()
    assert len(q) == 1


def test_full_queue_drops_extra():
    q = ProcessQueue()
    procs = [Pcb(pid=i) for i in range(MAX_QUEUE_SIZE + 2)]
    results = [q.enqueue(p) for p in procs]
    assert results.count(False) == 2
    assert q.size == MAX_QUEUE_SIZE
    assert list(q) == procs[:MAX_QUEUE_SIZE]


def test_custom_capacity():
    q = ProcessQueue(capacity=1)
    a, b = Pcb(pid=1), Pcb(pid=2)
    assert q.enqueue(a)
    assert not q.enqueue(b)
    assert q.dequeue() is a
    assert q.empty()