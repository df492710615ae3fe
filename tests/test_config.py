import pytest

import config
from config import Config

VARIABLES = (
    'SMTPDUMP_HOSTNAME', 'SMTPDUMP_ADDR', 'SMTPDUMP_OUTPUT', 'SMTPDUMP_EXTENSION',
    'SMTPDUMP_COLOR', 'SMTPDUMP_DEBUG', 'SMTPDUMP_VERBOSE', 'SMTPDUMP_WORKERS',
)


@pytest.fixture(autouse=True)
def environment(monkeypatch, tmp_path):
    monkeypatch.setattr(config, 'load_dotenv', lambda: None)
    for name in VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults(tmp_path):
    c = Config()
    c.update()

    assert c.hostname
    assert c.addr == '127.0.0.1:2525'
    assert c.host == '127.0.0.1'
    assert c.port == 2525
    assert c.output == str(tmp_path)
    assert c.extension == 'eml'
    assert c.color is True
    assert c.debug is False
    assert c.verbose is False
    assert c.workers == 4
    assert c.is_valid()


def test_environment(monkeypatch, tmp_path):
    monkeypatch.setenv('SMTPDUMP_ADDR', '0.0.0.0:25')
    monkeypatch.setenv('SMTPDUMP_OUTPUT', str(tmp_path))
    monkeypatch.setenv('SMTPDUMP_EXTENSION', 'txt')
    monkeypatch.setenv('SMTPDUMP_COLOR', 'off')
    monkeypatch.setenv('SMTPDUMP_VERBOSE', 'Yes')
    monkeypatch.setenv('SMTPDUMP_WORKERS', '2')

    c = Config()

    assert c.port == 25
    assert c.extension == 'txt'
    assert c.color is False
    assert c.verbose is True
    assert c.workers == 2


def test_overrides_win_and_none_is_ignored(monkeypatch):
    monkeypatch.setenv('SMTPDUMP_EXTENSION', 'txt')

    c = Config()
    c.update(extension='msg', hostname=None)

    assert c.extension == 'msg'
    assert c.hostname


def test_debug_implies_verbose():
    c = Config()
    c.update(debug=True)

    assert c.verbose is True


def test_validation_errors(tmp_path):
    c = Config()
    c.update(hostname='', addr='nowhere', output=str(tmp_path / 'missing'), extension='', workers=0)

    errors = c.get_validation_errors()

    assert 'Hostname cannot be empty' in errors
    assert len(errors) == 5
    assert not c.is_valid()


@pytest.mark.parametrize('addr', ['127.0.0.1', ':25', '127.0.0.1:0', '127.0.0.1:70000', 'host:port'])
def test_invalid_addresses(addr):
    c = Config()
    c.update(addr=addr)

    assert len(c.get_validation_errors()) == 1


@pytest.mark.parametrize('extension', ['e\0ml', 'a/eml', '../eml'])
def test_extension_must_be_a_plain_suffix(extension):
    c = Config()
    c.update(extension=extension)

    errors = c.get_validation_errors()

    assert len(errors) == 1
    assert 'path separators or NUL' in errors[0]
