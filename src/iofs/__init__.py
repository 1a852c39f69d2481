"""Asynchronous filesystem utilities that report failure as values."""

__version__ = "0.1.0"

from iofs.config import Settings
from iofs.errors import ConfigurationError, ErrorKind, IofsError
from iofs.filesystem import AsyncFileSystem
from iofs.protocols import FileSystem
from iofs.types import AccessMode, OperationOutcome, StatKind, StatResult, WriteOptions

# Operations of a default-configured instance, for callers that need no settings
_default = AsyncFileSystem()

cat = _default.cat
ls = _default.ls
echo = _default.echo
chmod = _default.chmod
chown = _default.chown
mv = _default.mv
cp = _default.cp
rm = _default.rm
stat = _default.stat
lstat = _default.lstat
isdir = _default.isdir
isfile = _default.isfile
mkdir = _default.mkdir
exists = _default.exists
is_ = _default.is_

__all__ = [
    "__version__",
    "AccessMode",
    "AsyncFileSystem",
    "ConfigurationError",
    "ErrorKind",
    "FileSystem",
    "IofsError",
    "OperationOutcome",
    "Settings",
    "StatKind",
    "StatResult",
    "WriteOptions",
    "cat",
    "chmod",
    "chown",
    "cp",
    "echo",
    "exists",
    "is_",
    "isdir",
    "isfile",
    "ls",
    "lstat",
    "mkdir",
    "mv",
    "rm",
    "stat",
]
