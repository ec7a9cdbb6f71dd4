# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Utility classes and functions for ldacore.
'''

__all__ = [
    'append_locked',
    'default_mailbox',
    'envelope_address',
    'eval_bool',
    'interpolate_path',
    'lock_file',
    'maildir_hostname',
    'mkdir_p',
    'unlock_file',
]


import os
import os.path
import socket
import time
import re
import fcntl
import errno
import pwd

from ldacore.exceptions import *
from ldacore.constants import *

_bool_values = {
    'true'  : True,
    'yes'   : True,
    'on'    : True,
    '1'     : True,
    'false' : False,
    'no'    : False,
    'off'   : False,
    '0'     : False
}

RE_HOMEDIR = re.compile(r'^~(\w*)/')
RE_ANGLE_ADDR = re.compile(r'<(.*?)>')
RE_COMMENT = re.compile(r'\s*\(.*\)\s*')
RE_WHITESPACE = re.compile(r'\s+')

#######################################
def _lock(file, locktype, flags):
    if locktype == 'lockf':
        fcntl.lockf(file, flags)
    else:
        fcntl.flock(file, flags)

#######################################
def lock_file(file, locktype, attempts=LOCK_ATTEMPTS, sleep=None):
    '''Take an exclusive lock on an open file.

    The lock is requested without blocking; if it is held elsewhere, sleep
    1 second and retry, then 2 seconds, and so on, for at most <attempts>
    tries.  Raises ldaLockTimeout if the lock was never obtained.
    '''
    assert locktype in ('lockf', 'flock'), 'unknown lock type %s' % locktype
    if sleep is None:
        sleep = time.sleep
    reason = None
    for attempt in range(1, attempts + 1):
        try:
            _lock(file, locktype, fcntl.LOCK_EX | fcntl.LOCK_NB)
            return
        except OSError as o:
            if o.errno not in (errno.EAGAIN, errno.EACCES):
                raise ldaDeliveryError('failure locking %s (%s)'
                                       % (file.name, o))
            reason = o
        if attempt < attempts:
            sleep(attempt)
    raise ldaLockTimeout('could not get exclusive lock on %s after %d '
                         'attempts (%s)' % (file.name, attempts, reason))

#######################################
def unlock_file(file, locktype):
    '''Do file unlocking.'''
    assert locktype in ('lockf', 'flock'), 'unknown lock type %s' % locktype
    _lock(file, locktype, fcntl.LOCK_UN)

#######################################
def append_locked(path, data, need_lock=True, locktype='flock',
                  filemode=0o600, exclusive=False, attempts=LOCK_ATTEMPTS,
                  sleep=None):
    '''Append <data> (bytes) to the file at <path>, creating it if needed.

    With <need_lock>, an exclusive lock is held around the write (see
    lock_file()).  With <exclusive>, the file must not exist beforehand.
    Each step that can fail raises its own subclass of ldaDeliveryError:
    ldaOpenError, ldaLockTimeout, ldaWriteError, ldaUnlockError,
    ldaCloseError.
    '''
    flags = os.O_WRONLY | os.O_APPEND | os.O_CREAT
    if exclusive:
        flags |= os.O_EXCL
    try:
        f = open(path, 'ab', buffering=0,
                 opener=lambda name, unused: os.open(name, flags, filemode))
    except OSError as o:
        raise ldaOpenError('failure opening %s (%s)' % (path, o))

    try:
        if need_lock:
            lock_file(f, locktype, attempts, sleep)
        status_old = os.fstat(f.fileno())
        try:
            view = memoryview(data)
            while view:
                view = view[os.write(f.fileno(), view):]
            os.fsync(f.fileno())
        except OSError as o:
            try:
                # Don't leave half a message at the end of the mailbox
                f.truncate(status_old.st_size)
            except OSError:
                pass
            raise ldaWriteError('failure writing message to %s (%s)'
                                % (path, o))
        if need_lock:
            try:
                unlock_file(f, locktype)
            except OSError as o:
                raise ldaUnlockError('failure unlocking %s (%s)' % (path, o))
    except ldaDeliveryError:
        try:
            f.close()
        except OSError:
            pass
        raise

    try:
        f.close()
    except OSError as o:
        raise ldaCloseError('failure closing %s after writing (%s)'
                            % (path, o))

#######################################
def mkdir_p(*paths):
    '''Create each of <paths>, along with any missing parent directories.
    '''
    for path in paths:
        if not path or os.path.isdir(path):
            continue
        try:
            os.makedirs(path, 0o777, exist_ok=True)
        except OSError as o:
            raise ldaDeliveryError('unable to mkdir %s (%s)' % (path, o))

#######################################
def interpolate_path(path, strftime=False, now=None):
    '''Expand strftime(3) "%" sequences (only if <strftime>) and a leading
    "~/" or "~username/" in a mailbox path.
    '''
    if strftime and '%' in path:
        path = time.strftime(path, time.localtime(now))
    match = RE_HOMEDIR.match(path)
    if not match:
        return path
    try:
        if match.group(1):
            home = pwd.getpwnam(match.group(1)).pw_dir
        else:
            home = pwd.getpwuid(os.geteuid()).pw_dir
    except KeyError:
        return path
    return home.rstrip('/') + '/' + path[match.end():]

#######################################
def default_mailbox(environ=None):
    '''Return the mailbox used when no destination is given: $MAIL, else the
    user's system spool file if it exists, else ~/Maildir/ if it is a
    maildir.  None if there is no candidate.
    '''
    if environ is None:
        environ = os.environ
    if environ.get('MAIL'):
        return environ['MAIL']
    try:
        user = pwd.getpwuid(os.geteuid())
    except KeyError:
        # no passwd entry, so no spool file or home directory to look in
        return None
    for spooldir in SPOOL_DIRS:
        if os.path.isdir(spooldir):
            unixbox = os.path.join(spooldir, user.pw_name)
            if os.path.exists(unixbox):
                return unixbox
            break
    maildir = os.path.join(user.pw_dir, 'Maildir') + '/'
    if os.path.isdir(os.path.join(maildir, 'cur')):
        return maildir
    return None

#######################################
def envelope_address(value):
    '''Reduce a header field value to a bare address for an mbox From_ line.

      comment <user@example.org>  -> user@example.org
      user@example.org (comment)  -> user@example.org
    '''
    value = value.strip()
    match = RE_ANGLE_ADDR.search(value)
    if match:
        value = match.group(1)
    value = RE_COMMENT.sub('', value)
    return RE_WHITESPACE.sub('', value) or '<>'

#######################################
def eval_bool(s):
    '''Handle boolean values intelligently.
    '''
    try:
        return _bool_values[str(s).lower()]
    except KeyError:
        raise ldaConfigurationError(
            'boolean parameter requires value to be one of true or false, '
            'not "%s"' % s
        )

#######################################
def maildir_hostname():
    '''Return the short hostname, made safe for use in a maildir filename.'''
    return (socket.gethostname().split('.')[0].replace('/', '\\057')
            .replace(':', '\\072'))
