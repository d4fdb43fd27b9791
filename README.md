# draftxfer

Building blocks for moving large files quickly over several TCP
connections at once. The package is a library and has no command of its own.

The package assumes Linux. Some helpers use `pwritev`, `posix_fallocate`,
`ioctl` and `/dev/net/tun`.

## Install

    pip install draftxfer

To run the tests, install the test extra:

    pip install "draftxfer[test]"

## What is inside

- `draftxfer.waitqueue.WaitQueue` is a thread-safe FIFO.
  - It takes an optional `size_limit`. `put` returns `False` at once when the queue is full.
  - `get(timeout)` waits for an item and returns `None` if the timeout runs out.
  - `try_get()` never waits.
  - `cancel()` wakes every waiting consumer. After that, `get` returns `None`.
  - `resume()` clears the cancelled state.
- `draftxfer.taskpool.TaskPool` runs work on a set of worker threads.
  - `launch(function, *args)` queues a call and returns a
    `concurrent.futures.Future`. It returns `None` when the queue limit set with
    `set_queue_size_limit` has been reached.
  - Each function is called as `function(stop, *args)`, where `stop` is a
    `threading.Event`.
  - `resize` grows or shrinks the pool and `cancel` stops handing out work.
  - Used as a context manager, the pool cancels and joins its workers on exit.
- `draftxfer.model` holds the data types `FileInfo`, `FileStatus`,
  `NetworkTarget`, `Segment` and `SessionConfig`. It also has `round_block_size`,
  which rounds up to 4096-byte blocks. `FileInfo.to_dict` and `FileInfo.from_dict`
  convert to and from a JSON-ready dictionary.
- `draftxfer.files` works with files on disk.
  - `read_chunk` and `write_chunk` do positional chunk reads and writes.
  - `get_file_info` scans a file or directory tree. Files get ids from 1 and
    directories keep id 0.
  - `parse_target` parses `host[:port]`, with 2021 as the default port.
  - `parse_size` parses a size.
  - `create_target_files` creates and preallocates destination files, with the
    helpers `rooted_path` and `dirname`.
- `draftxfer.handles` has the owning wrappers `ScopedFd` and `ScopedTempFile`,
  and `make_temp_file`. Both wrappers work as context managers.
- `draftxfer.net` has the socket helpers:
  - `bind_tcp`
  - `connect_tcp`, which takes an optional timeout in milliseconds and returns
    `None` when the timeout runs out
  - `bind_udp`
  - `connect_udp`
  - `accept`
  - `set_non_blocking`
  - `udp_send_queue_size`
  - `write_all`
  - `read_all`
  - `peer_name`
  - `bind_tun`
  - `connect_network_targets`
  - `bind_network_targets`
- `draftxfer.progress.ProgressDisplay` is an ANSI terminal display.
  - It draws one progress bar per key (`add`, `update`, `remove`) and a smoothed
    ETA line (`update_eta`).
  - `render()` draws a frame and `complete()` draws the final one.
  - The module also provides `format_eta`, `progress_meter`, `win_size` and the
    cursor escape helpers.
- `draftxfer.version.version_string()` returns the modification time of the
  installed module as `Mmm dd yyyy hh:mm:ss`.

## Example

```python
from draftxfer.files import get_file_info, parse_target
from draftxfer.taskpool import TaskPool
from draftxfer.waitqueue import WaitQueue

target = parse_target("127.0.0.1:2021")
infos = get_file_info("some/directory")

queue = WaitQueue(size_limit=100)

def produce(stop, info):
    queue.put(info, timeout=0.1)
    return info.id

with TaskPool(2) as pool:
    futures = [pool.launch(produce, info) for info in infos]
    ids = [f.result() for f in futures if f is not None]
```

## What this package does not do

The package provides the parts but does not assemble them into a transfer tool:

- It has no command-line program.
- It has no sender or receiver that splits files into chunks and streams them
  over the sockets.
- It defines no on-the-wire chunk header.
- It has no hash journal or verification of transferred data.

Those pieces are left to the code that uses this library.