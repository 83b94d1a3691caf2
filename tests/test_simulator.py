import pytest

from ossim.common import MAX_PRIO
from ossim.loader import LoaderError
from ossim.simulator import ConfigError, Simulator, main, read_config


def _write_config(directory, time_slot, num_cpus, processes, memram=4096, swaps=(4096, 0, 0, 0)):
    lines = [f"{time_slot} {num_cpus} {len(processes)}", str(memram), " ".join(map(str, swaps))]
    lines += [f"{start} {name} {prio}" for start, name, prio in processes]
    path = directory / "input" / "conf"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
    return path


def _write_proc(directory, name, body):
    path = directory / "input" / "proc" / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body)
    return path


def test_read_config_fields(tmp_path):
    path = _write_config(tmp_path, 2, 3, [(0, "p0", 1), (4, "p1", 0)], memram=8192, swaps=(512, 256, 0, 0))
    config = read_config(path)
    assert config.time_slot == 2
    assert config.num_cpus == 3
    assert config.memramsz == 8192
    assert config.memswpsz == [512, 256, 0, 0]
    assert [p.path for p in config.processes] == ["input/proc/p0", "input/proc/p1"]
    assert [p.start_time for p in config.processes] == [0, 4]
    assert [p.prio for p in config.processes] == [1, 0]


def test_read_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        read_config(tmp_path / "absent")


def test_read_config_truncated(tmp_path):
    path = tmp_path / "conf"
    path.write_text("2 1 1\n4096\n4096 0 0 0\n0 p0\n")
    with pytest.raises(ConfigError):
        read_config(path)


def test_read_config_not_a_number(tmp_path):
    path = tmp_path / "conf"
    path.write_text("two 1 0\n4096\n0 0 0 0\n")
    with pytest.raises(ConfigError):
        read_config(path)


def test_read_config_priority_out_of_range(tmp_path):
    path = _write_config(tmp_path, 1, 1, [(0, "p0", MAX_PRIO)])
    with pytest.raises(ConfigError):
        read_config(path)


def test_calc_processes_all_finish(tmp_path):
    _write_proc(tmp_path, "a", "1 3\ncalc\ncalc\ncalc\n")
    _write_proc(tmp_path, "b", "0 2\ncalc\ncalc\n")
    config = read_config(_write_config(tmp_path, 2, 2, [(0, "a", 1), (1, "b", 0)]))
    sim = Simulator(config, root=tmp_path)
    finished = sim.run()
    assert sorted(finished) == [1, 2]
    assert sim.errors == []
    assert sim.scheduler.queue_empty()


def test_memory_program_writes_to_ram(tmp_path):
    _write_proc(tmp_path, "m", "0 3\nalloc 300 0\nwrite 100 0 20\nread 0 20 0\n")
    config = read_config(_write_config(tmp_path, 2, 1, [(0, "m", 0)]))
    sim = Simulator(config, root=tmp_path)
    assert sim.run() == [1]
    assert sim.errors == []
    assert sim.mram.storage.count(100) == 1


def test_failing_instruction_is_recorded(tmp_path):
    _write_proc(tmp_path, "bad", "0 1\nread 0 0 0\n")
    config = read_config(_write_config(tmp_path, 1, 1, [(0, "bad", 0)]))
    sim = Simulator(config, root=tmp_path)
    assert sim.run() == [1]
    assert len(sim.errors) == 1
    pid, exc = sim.errors[0]
    assert pid == 1
    assert isinstance(exc, LookupError)


def test_missing_process_file(tmp_path):
    config = read_config(_write_config(tmp_path, 1, 1, [(0, "ghost", 0)]))
    with pytest.raises(LoaderError):
        Simulator(config, root=tmp_path).run()


def test_main_usage(capsys):
    assert main([]) == 1
    assert "Usage" in capsys.readouterr().out


def test_main_missing_config(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["nothing"]) == 1
    assert "Cannot find configure file" in capsys.readouterr().out


def test_main_runs_simulation(tmp_path, monkeypatch, capsys):
    _write_proc(tmp_path, "p0", "0 2\ncalc\ncalc\n")
    _write_config(tmp_path, 1, 1, [(0, "p0", 0)])
    monkeypatch.chdir(tmp_path)
    assert main(["conf"]) == 0
    out = capsys.readouterr().out
    assert "Loaded a process at input/proc/p0" in out
    assert "CPU 0 stopped" in out