# ossim

A small operating-system simulator. It loads process descriptions, schedules
them over several simulated CPUs with a multi-level ready queue, and runs their
instructions against a paging-based memory manager backed by one RAM device and
four swap devices. Time advances in discrete slots; the CPUs and the loader
move from one slot to the next together. Memory operations print the page
table, and reads and writes also print the non-zero bytes of RAM.

## Installation

```
pip install .
```

## Running a simulation

```
ossim <config>
```

`<config>` is a path relative to an `input/` directory in the current working
directory. The file is read as whitespace-separated numbers and names in this
order:

```
<time slot> <number of CPUs> <number of processes>
<RAM size> <SWAP0 size> <SWAP1 size> <SWAP2 size> <SWAP3 size>
<start time> <process file> <priority>
...
```

Priorities run from 0 to 139; a lower number is served more often. Process
files are read from `input/proc/` in the current working directory. The command
exits with status 1 when the configuration or a process file cannot be read.

Each process file starts with `<priority> <number of instructions>`, followed by
the instructions:

| Instruction               | Meaning                                                     |
|---------------------------|-------------------------------------------------------------|
| `calc`                    | use the CPU for one slot                                    |
| `alloc <size> <reg>`      | allocate `size` bytes into region `reg`                     |
| `free <reg>`              | give region `reg` back to the free list                     |
| `read <reg> <off> <dst>`  | read and report the byte at offset `off` of region `reg`    |
| `write <val> <reg> <off>` | write byte `val` into region `reg` at offset `off`          |
| `syscall <nr> [a1 a2 a3]` | make system call `nr` with up to three arguments on its line |
| `memmap <reg> <off>`      | show how an address in `reg` maps to a page and frame       |

`<dst>` of `read` is accepted but the value read is only reported, not stored.

The system calls are:

| Number | Name              | Effect                                                         |
|--------|-------------------|----------------------------------------------------------------|
| 0      | `sys_listsyscall` | print the system call table                                    |
| 17     | `sys_memmap`      | memory operation chosen by `a1` (see `ossim.sysmem.MemOp`)     |
| 101    | `sys_killall`     | read a name from region `a1` up to a byte of -1 and free the running processes with that path |

Any other number does nothing.

If an instruction fails (for example, RAM runs out of frames), the error is
printed and the process goes on with its next instruction.

## Using it as a library

- `ossim.memphy.MemPhy` is a physical memory split into 256-byte frames, with
  `read`, `write`, `get_free_frame`, `put_free_frame` and `dump`.
  `get_free_frame` raises `OutOfFramesError` when no frame is left.
- `ossim.paging` has the bit helpers and page-table-entry functions
  (`page_number`, `page_offset`, `page_align`, `pte_set_fpn`, `pte_set_swap`,
  `pte_fpn`, `pte_present`, `init_pte`, ...). They take an entry and return the
  new one.
- `ossim.vm` manages address spaces: `init_mm`, `inc_vma_limit`,
  `alloc_pages_range`, `vm_map_ram`, `memory_map` and `print_pgtbl`.
- `ossim.libmem` has `liballoc`, `libfree`, `libread` and `libwrite`, which work
  on a process's virtual memory. A page that is not in RAM is brought in from
  the active swap device, and the oldest mapped page is moved out in its place.
- `ossim.cp.copy_from_userspace` copies the bytes of a region up to a byte of -1.
- `ossim.syscall.syscall` and `ossim.syscall.libsyscall` dispatch system calls.
- `ossim.loader.Loader` parses process descriptions (`parse` for text, `load`
  for a file) into `ossim.common.Pcb` objects with increasing PIDs, and
  `ossim.cpu.run` executes one instruction, returning `False` when the program
  has ended.
- `ossim.sched.Scheduler` is the multi-level queue scheduler (`add_proc`,
  `put_proc`, `get_proc`, `queue_empty`).
- `ossim.timer.Timer` drives `TimerEvent` devices slot by slot.
- `ossim.simulator.read_config` parses a configuration file into a `Config`, and
  `Simulator(config, root=None).run()` runs it, returning the PIDs in the order
  the processes finished. `root` is the directory that process paths such as
  `input/proc/p0` are resolved against.

## What it does not do

- Memory is always paging-based; there is no mode without paging and no fixed
  memory size that ignores the configuration.
- Memory devices are random access only; a sequential-access device raises
  `ValueError` on every read and write.
- Only the first swap device is ever used; the other three are created but
  stay idle.
- Freed regions are put on a free list but never merged with their
  neighbours.

## Running the tests

```
pip install .[test]
pytest
```