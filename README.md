# lustremon

A library for building and parsing the short, semicolon-separated metric
strings that Lustre servers publish about themselves. It covers object
storage servers and targets, metadata servers and targets, OSC connection
states and LNET routers. It also includes a small configuration reader and a
message logger.

It needs only the Python standard library (3.10 or newer).

## Metric formats

| Metric       | Version | Build                         | Decode                                           |
|--------------|---------|-------------------------------|--------------------------------------------------|
| `lmt_ost`    | 2       | `ost.format_ost_v2`           | `ost.decode_ost_v2`, `ost.decode_ost_v2_ostinfo` |
| `lmt_mdt`    | 1       | `mdt.format_mdt_v1`           | `mdt.decode_mdt_v1`, `mdt.decode_mdt_v1_mdtinfo`, `mdt.decode_mdt_v1_mdops` |
| `lmt_osc`    | 1       | `osc.format_osc_v1`           | `osc.decode_osc_v1`, `osc.decode_osc_v1_oscinfo` |
| `lmt_router` | 1       | `router.format_router_v1`     | `router.decode_router_v1`                        |
| `lmt_oss`    | 1       | —                             | `ost.decode_oss_v1` (legacy)                     |
| `lmt_ost`    | 1       | —                             | `ost.decode_ost_v1` (legacy)                     |
| `lmt_mds`    | 2       | —                             | `mdt.decode_mds_v2`, `mdt.decode_mds_v2_mdops` (legacy) |

Multi-target strings are decoded in two steps. `decode_ost_v2`,
`decode_mdt_v1` and `decode_osc_v1` return a report (`OssReport`,
`MdsReport`, `OscReport`) holding the server fields and a list of raw
per-target field groups. You then decode each group with the matching
`*_ostinfo`, `*_mdtinfo` or `*_oscinfo` function.

Targets to encode are described with `ost.OstInfo` and `mdt.MdtInfo`. Each
has an `encode()` method. `MdtInfo.encode()` writes every operation of the
fixed operation table in order, and writes zeroes for operations that have no
`MdOp`. Helpers for building values include `ost.sum_iops`,
`ost.format_recovery_status`, `osc.osc_state_code` and
`util.memory_percent`.

When a string is malformed, the decoders raise `lustremon.util.ParseError`,
which is a subclass of `ValueError`. The format functions raise `ValueError`
when they are given no targets.

## Example

```python
from lustremon.router import format_router_v1, decode_router_v1

s = format_router_v1("rtr1", 12.5, 40.0, 123456)
# "1.0;rtr1;12.500000;40.000000;123456"
report = decode_router_v1(s)
# RouterReport(name='rtr1', pct_cpu=12.5, pct_mem=40.0, bytes=123456)
```

## Dispatching incoming metrics

`lustremon.monitor.dispatch_metric(nodename, metric_name, value, sink)` reads
the leading version number of a metric value, which may be `str` or `bytes`.
It then calls the matching `insert_*` method of `sink` with the whole string.
`MetricSink` is a protocol that describes those methods:

- `insert_ost_v2`
- `insert_mdt_v1`
- `insert_router_v1`
- `insert_mds_v2`
- `insert_oss_v1`
- `insert_ost_v1`

The function raises in these cases:

- `TypeError` for a value of any other type.
- `ParseError` when the version cannot be read.
- `UnknownMetricError` for a name/version pair it does not handle.

`metric_names()` returns the comma-separated list of accepted metric names,
and `parse_version(s)` reads the version field alone.

## Configuration

`lustremon.conf.load_config(path=None, verbose=False)` reads a file of
Lua-style global assignments into an `LmtConfig` dataclass. With no path, it
reads `/etc/lmt/lmt.conf` if that file is readable. Otherwise it returns the
defaults. `parse_config(text, path)` parses text directly.

Each setting comes from the global of the same name with an `lmt_` prefix:

- Strings: `lmt_db_rwuser`, `lmt_db_rwpasswd`, `lmt_db_rouser`,
  `lmt_db_ropasswd`, `lmt_db_host`.
- Numbers: `lmt_db_port`, `lmt_db_debug`, `lmt_db_autoconf`,
  `lmt_cbr_debug`, `lmt_proto_debug`.

Bad syntax or a value of the wrong kind raises `ConfigError`.

```
lmt_db_host = "localhost"
lmt_db_port = 3306
lmt_db_rouser = "lwatchclient"
```

## Logging

`lustremon.errlog.ErrorLog(prog)` writes messages prefixed with the program
name. `set_dest()` selects the destination:

- `"stderr"`
- `"stdout"`
- a file name, which is appended to
- `"syslog"`
- `"syslog:FACILITY[:LEVEL]"`

An unknown syslog facility or level raises `ValueError`. `get_dest()`
describes the current destination. `msg()` logs a message, and
`err(message, errnum)` adds the text for an error number. `msg_exit()` and
`err_exit()` log the message and then raise `SystemExit(1)`. An `ErrorLog`
works as a context manager that closes any open file or syslog connection.

## What this package does not do

- It does not collect statistics from a running system: no `/proc` reading.
  The caller supplies CPU, memory and target figures to the format functions.
- It does not store metrics in a database. `dispatch_metric` only routes
  strings to a `MetricSink` that you provide.
- It provides no command-line program and no display tool.