import os
import socket

from dotenv import load_dotenv

_TRUE = ('1', 'true', 'yes', 'on')
_FORBIDDEN = ('\0', '/', os.sep) + ((os.altsep,) if os.altsep else ())


def _getbool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default

    return value.strip().lower() in _TRUE


class Config:
    """A class that holds the current configuration"""
    hostname: str
    addr: str
    output: str
    extension: str
    color: bool
    debug: bool
    verbose: bool
    workers: int

    def __init__(self):
        load_dotenv()

        self.hostname = os.getenv('SMTPDUMP_HOSTNAME', socket.gethostname())
        self.addr = os.getenv('SMTPDUMP_ADDR', '127.0.0.1:2525')
        self.output = os.getenv('SMTPDUMP_OUTPUT', '')
        self.extension = os.getenv('SMTPDUMP_EXTENSION', 'eml')
        self.color = _getbool('SMTPDUMP_COLOR', True)
        self.debug = _getbool('SMTPDUMP_DEBUG', False)
        self.verbose = _getbool('SMTPDUMP_VERBOSE', False)
        self.workers = int(os.getenv('SMTPDUMP_WORKERS', '4'))

    def update(self, **overrides) -> None:
        for key, value in overrides.items():
            if value is not None:
                setattr(self, key, value)

        if self.debug:
            self.verbose = True

        if not self.output:
            self.output = os.getcwd()

    @property
    def host(self) -> str:
        return self.addr.rpartition(':')[0]

    @property
    def port(self) -> int:
        return int(self.addr.rpartition(':')[2])

    def is_valid(self) -> bool:
        errors = self.get_validation_errors()
        return len(errors) == 0

    def get_validation_errors(self) -> list[str]:
        errors = []

        if not self.hostname:
            errors.append('Hostname cannot be empty')

        host, sep, port = self.addr.rpartition(':')
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            errors.append(f'The listen address {self.addr!r} must have the form host:port')

        if not os.path.isdir(self.output or os.getcwd()):
            errors.append(f'The output directory {self.output!r} does not exist')

        if not self.extension:
            errors.append('The file extension cannot be empty')
        elif any(c in self.extension for c in _FORBIDDEN):
            errors.append(f'The file extension {self.extension!r} cannot contain path separators or NUL')

        if self.workers < 1:
            errors.append('At least one worker is required')

        return errors
