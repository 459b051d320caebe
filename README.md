# procfskit

Parsers for the text that the Linux kernel exposes under `/proc`. Every parser
works on text you hand it, so it behaves the same on a saved copy of a file, on
a test fixture or on a live `/proc` read.

## Installation

```
pip install procfskit
```

To run the test suite:

```
pip install "procfskit[test]"
pytest
```

## What it parses

| Module | Data | Entry point |
| --- | --- | --- |
| `procfskit.uptime` | `/proc/uptime` | `Uptime.from_text` |
| `procfskit.pressure` | `/proc/pressure/{cpu,memory,io}` | `CpuPressure`, `MemoryPressure`, `IoPressure` `.from_text`, `parse_pressure_record` |
| `procfskit.shm` | `/proc/sysvipc/shm` | `SharedMemorySegments.from_text` |
| `procfskit.stat` | `/proc/<pid>/stat` | `Stat.from_text` |
| `procfskit.status` | `/proc/<pid>/status` | `Status.from_text`, `parse_uid_gid` |
| `procfskit.procio` | `/proc/<pid>/io`, `/proc/<pid>/statm` | `Io.from_text`, `StatM.from_text` |
| `procfskit.schedstat` | `/proc/<pid>/schedstat` | `Schedstat.from_text` |
| `procfskit.limit` | `/proc/<pid>/limits` | `Limits.from_text`, `parse_limit_value` |
| `procfskit.maps` | `/proc/<pid>/{maps,smaps,smaps_rollup}` | `MemoryMaps.from_text`, `SmapsRollup.from_text`, `MMapPath.parse` |
| `procfskit.mountinfo` | `/proc/<pid>/mountinfo` | `MountInfos.from_text`, `MountInfo.from_line` |
| `procfskit.nfsstats` | the NFS statistics block of a mount in `/proc/<pid>/mountstats` | `MountNFSStatistics.from_lines` |
| `procfskit.fdtarget` | link targets in `/proc/<pid>/fd/` | `FDTarget.parse` |
| `procfskit.pagemap` | 64-bit entries of `/proc/<pid>/pagemap` | `parse_page_info`, `genmask` |

Supporting types:

- `procfskit.flags` holds the flag sets `StatFlags`, `CoredumpFlags`,
  `MMPermissions` and `VmFlags`, and the `ProcState` enum.
- `procfskit.namespaces` holds `Namespace` and `Namespaces`; two `Namespace`
  objects compare equal when their `identifier` and `device_id` match.
- `procfskit.errors` holds the exceptions.

When the input is malformed or a required field is missing, the parsers raise
`procfskit.errors.ProcError` or one of its subclasses, `IncompleteError` (data
missing) and `InternalError` (a value that cannot be interpreted).

## Examples

```python
from pathlib import Path

from procfskit.pressure import MemoryPressure
from procfskit.stat import Stat
from procfskit.uptime import Uptime

uptime = Uptime.from_text(Path("/proc/uptime").read_text())
print(uptime.uptime_duration())

stat = Stat.from_text(Path("/proc/self/stat").read_text())
print(stat.pid, stat.comm, stat.process_state())
print("RSS bytes:", stat.rss_bytes(4096))

pressure = MemoryPressure.from_text(Path("/proc/pressure/memory").read_text())
print(pressure.some.avg10, pressure.full.total)
```

Memory maps and permissions:

```python
from procfskit.flags import MMPermissions
from procfskit.maps import MemoryMaps

maps = MemoryMaps.from_text(Path("/proc/self/maps").read_text())
for entry in maps:
    print(hex(entry.address[0]), entry.perms.as_str(), entry.pathname.kind)

assert MMPermissions.parse("rw-p") == MMPermissions.READ | MMPermissions.WRITE | MMPermissions.PRIVATE
```

Page table entries read from a pagemap file:

```python
from procfskit.pagemap import MemoryPageFlags, parse_page_info

info = parse_page_info(0x8180000000000003)
if isinstance(info, MemoryPageFlags):
    print(f"pfn: {info.page_frame_number():x}")
```

## What it does not do

- It never opens `/proc` itself; you read the file and pass the text in.
- It has no command-line tool.
- For `/proc/<pid>/mountstats` it parses only the NFS statistics block that
  follows a mount's `device ...` line (`MountNFSStatistics.from_lines`); it
  has no parser for the whole file.
- It has no parsers for the files under `/proc/sys/kernel`, such as the
  kernel version, build information, semaphore limits or SysRq settings, and
  no type for the values written to `/proc/<pid>/clear_refs`.