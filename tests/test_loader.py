import pytest

from ossim.common import PAGE_SIZE, Instruction, Opcode
from ossim.loader import Loader, LoaderError, parse_opcode

PROGRAM = "3 4\ncalc\nalloc 300 0\nwrite 100 0 20\nsyscall 17 1 2 3\n"


def test_parse_opcode_known_names():
    assert parse_opcode("write") is Opcode.WRITE
    assert parse_opcode("memmap") is Opcode.MEMMAP


def test_parse_opcode_unknown_raises():
    with pytest.raises(LoaderError):
        parse_opcode("jump")


def test_parse_program():
    proc = Loader().parse(PROGRAM, "input/proc/p0")
    assert proc.priority == 3
    assert proc.path == "input/proc/p0"
    assert proc.pc == 0
    assert proc.bp == PAGE_SIZE
    assert proc.code.text == [
        Instruction(Opcode.CALC),
        Instruction(Opcode.ALLOC, 300, 0),
        Instruction(Opcode.WRITE, 100, 0, 20),
        Instruction(Opcode.SYSCALL, 17, 1, 2, 3),
    ]


def test_pids_increase():
    loader = Loader()
    first = loader.parse(PROGRAM)
    second = loader.parse(PROGRAM)
    assert first.pid == 1
    assert second.pid == first.pid + 1


def test_syscall_with_partial_arguments():
    proc = Loader().parse("1 2\nsyscall 0\ncalc\n")
    assert proc.code.text[0] == Instruction(Opcode.SYSCALL, 0)
    assert proc.code.text[1].opcode is Opcode.CALC


def test_truncated_program_raises():
    with pytest.raises(LoaderError):
        Loader().parse("1 3\ncalc\n")


def test_bad_number_raises():
    with pytest.raises(LoaderError):
        Loader().parse("1 1\nalloc x 0\n")


def test_load_from_file(tmp_path):
    path = tmp_path / "p0"
    path.write_text(PROGRAM)
    proc = Loader().load(path)
    assert proc.path == str(path)
    assert proc.code.size == 4


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(LoaderError):
        Loader().load(tmp_path / "absent")