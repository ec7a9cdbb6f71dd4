import errno
import fcntl
import os
import pwd
import socket
import time
import types

import pytest

from ldacore import utilities
from ldacore.utilities import *
from ldacore.exceptions import *


def test_interpolate_home():
    home = pwd.getpwuid(os.geteuid()).pw_dir.rstrip('/')
    assert interpolate_path('~/Mail/inbox') == home + '/Mail/inbox'
    user = pwd.getpwuid(os.geteuid()).pw_name
    assert interpolate_path('~%s/Maildir/' % user) == home + '/Maildir/'

def test_interpolate_leaves_other_paths():
    assert interpolate_path('/var/mail/x') == '/var/mail/x'
    assert interpolate_path('mail/~/x') == 'mail/~/x'
    assert interpolate_path('~nosuchuser9x7q/box') == '~nosuchuser9x7q/box'

def test_interpolate_strftime():
    now = time.mktime((2026, 10, 19, 12, 0, 0, 0, 0, -1))
    assert interpolate_path('/tmp/lists-%Y-%m', now=now) == '/tmp/lists-%Y-%m'
    assert interpolate_path('/tmp/lists-%Y-%m', strftime=True,
                            now=now) == '/tmp/lists-2026-10'

def test_default_mailbox_from_environment():
    assert default_mailbox({'MAIL': '/tmp/box'}) == '/tmp/box'

def fake_user(monkeypatch, home):
    user = types.SimpleNamespace(pw_name='tester', pw_dir=str(home))
    monkeypatch.setattr(pwd, 'getpwuid', lambda uid: user)

def test_default_mailbox_spool(tmp_path, monkeypatch):
    fake_user(monkeypatch, tmp_path / 'home')
    spool = tmp_path / 'spool'
    spool.mkdir()
    monkeypatch.setattr(utilities, 'SPOOL_DIRS',
                        (str(tmp_path / 'nospool') + '/', str(spool) + '/'))
    assert default_mailbox({}) is None
    (spool / 'tester').touch()
    assert default_mailbox({}) == str(spool / 'tester')

def test_default_mailbox_maildir(tmp_path, monkeypatch):
    fake_user(monkeypatch, tmp_path)
    monkeypatch.setattr(utilities, 'SPOOL_DIRS', ())
    assert default_mailbox({}) is None
    (tmp_path / 'Maildir' / 'cur').mkdir(parents=True)
    assert default_mailbox({}) == str(tmp_path / 'Maildir') + '/'

def test_default_mailbox_without_passwd_entry(tmp_path, monkeypatch):
    def nouser(uid):
        raise KeyError('getpwuid(): uid not found: %d' % uid)
    monkeypatch.setattr(pwd, 'getpwuid', nouser)
    assert default_mailbox({}) is None
    assert default_mailbox({'MAIL': '/tmp/box'}) == '/tmp/box'

@pytest.mark.parametrize("value,expected", [
    ('<user@example.org>', 'user@example.org'),
    ('Some One <user@example.org>', 'user@example.org'),
    ('user@example.org (Some One)', 'user@example.org'),
    ('  user@example.org\n', 'user@example.org'),
    ('user @ example.org', 'user@example.org'),
    ('<>', '<>'),
])
def test_envelope_address(value, expected):
    assert envelope_address(value) == expected

def test_eval_bool():
    assert eval_bool('Yes') is True
    assert eval_bool(0) is False
    with pytest.raises(ldaConfigurationError):
        eval_bool('maybe')

def test_maildir_hostname(monkeypatch):
    monkeypatch.setattr(socket, 'gethostname', lambda: 'my/host:x.example.org')
    assert maildir_hostname() == 'my\\057host\\072x'

def test_append_creates_and_appends(tmp_path):
    fl = tmp_path / 'box'
    append_locked(str(fl), b'one\n')
    append_locked(str(fl), b'two\n', filemode=0o644)
    assert fl.read_bytes() == b'one\ntwo\n'
    assert (fl.stat().st_mode & 0o777) == 0o600

def test_append_exclusive(tmp_path):
    fl = tmp_path / 'tmpfile'
    append_locked(str(fl), b'data', need_lock=False, exclusive=True)
    with pytest.raises(ldaOpenError):
        append_locked(str(fl), b'again', need_lock=False, exclusive=True)
    assert fl.read_bytes() == b'data'

def test_append_open_failure(tmp_path):
    with pytest.raises(ldaOpenError):
        append_locked(str(tmp_path / 'missing' / 'box'), b'data')

def test_lock_timeout(tmp_path):
    fl = tmp_path / 'box'
    fl.write_bytes(b'old\n')
    sleeps = []
    with open(fl, 'ab') as holder:
        fcntl.flock(holder, fcntl.LOCK_EX)
        with pytest.raises(ldaLockTimeout):
            append_locked(str(fl), b'new\n', sleep=sleeps.append)
    assert sleeps == [1, 2, 3, 4, 5, 6, 7, 8, 9]
    assert fl.read_bytes() == b'old\n'

def test_lock_acquired_after_retry(tmp_path):
    fl = tmp_path / 'box'
    holder = open(fl, 'ab')
    fcntl.flock(holder, fcntl.LOCK_EX)
    def release(seconds):
        holder.close()
    append_locked(str(fl), b'new\n', sleep=release)
    assert fl.read_bytes() == b'new\n'

def test_write_failure_is_reported(tmp_path, monkeypatch):
    fl = tmp_path / 'box'
    fl.write_bytes(b'old\n')
    def fail(fd):
        raise OSError(28, 'No space left on device')
    monkeypatch.setattr(os, 'fsync', fail)
    with pytest.raises(ldaWriteError):
        append_locked(str(fl), b'new\n')
    assert fl.read_bytes() == b'old\n'

def test_partial_write_is_undone(tmp_path, monkeypatch):
    fl = tmp_path / 'box'
    fl.write_bytes(b'old\n')
    real_write = os.write
    calls = []
    def write(fd, data):
        calls.append(len(data))
        if len(calls) > 1:
            raise OSError(28, 'No space left on device')
        return real_write(fd, bytes(data[:4]))
    monkeypatch.setattr(os, 'write', write)
    with pytest.raises(ldaWriteError):
        append_locked(str(fl), b'new message\n')
    monkeypatch.undo()
    assert calls == [12, 8]
    assert fl.read_bytes() == b'old\n'

def test_lock_failure_is_not_retried(tmp_path, monkeypatch):
    fl = tmp_path / 'box'
    def nolock(file, flags):
        raise OSError(errno.ENOLCK, 'No locks available')
    monkeypatch.setattr(fcntl, 'flock', nolock)
    sleeps = []
    with pytest.raises(ldaDeliveryError) as excinfo:
        append_locked(str(fl), b'new\n', sleep=sleeps.append)
    assert not isinstance(excinfo.value, ldaLockTimeout)
    assert sleeps == []
    assert fl.read_bytes() == b''

def test_mkdir_p(tmp_path):
    mkdir_p(str(tmp_path / 'a' / 'b'), '', str(tmp_path / 'c'))
    assert (tmp_path / 'a' / 'b').is_dir()
    assert (tmp_path / 'c').is_dir()
    (tmp_path / 'file').touch()
    with pytest.raises(ldaDeliveryError):
        mkdir_p(str(tmp_path / 'file' / 'sub'))
