# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Classes implementing mailbox writers (one per kind of local mailbox
ldacore can deliver mail to).

Currently implemented:

  MboxWriter (append to an mbox file under an exclusive lock)
  MaildirWriter (write once into a maildir tmp/, hardlink into new/ of every
    target maildir)
  MHWriter, MsgprefixWriter (recognized, but not delivered to)

Writers never raise delivery errors to their caller.  Each failing target is
logged, its exception kept in the writer's <errors> list, and left out of
the returned list of paths.
'''

__all__ = [
    'WriterSkeleton',
    'MaildirCounter',
    'MaildirWriter',
    'MboxWriter',
    'MHWriter',
    'MsgprefixWriter',
]

import os
import os.path
import time
import errno

from ldacore.exceptions import *
from ldacore.utilities import *
from ldacore.constants import *
import ldacore.logging

#######################################
class WriterSkeleton(object):
    '''Base class for mailbox writers.

    Sub-classes should provide the following methods:

      __str__(self) - return a simple string naming the writer.

      _deliver(self, msg, paths) - write <msg> to each of <paths>, returning
                        the list of absolute paths written to.  Per-target
                        failures go through self._failed().

    Callers use deliver(), which clears <errors> first.
    '''
    def __init__(self):
        self.log = ldacore.logging.Logger()
        self.errors = []

    def deliver(self, msg, paths):
        self.log.trace()
        self.errors = []
        return self._deliver(msg, list(paths))

    def _failed(self, error):
        self.log.error('%s: %s\n' % (self, error))
        self.errors.append(error)

#######################################
class MboxWriter(WriterSkeleton):
    '''mbox destination with flock/lockf-style locking.

    Each message is written as an envelope "From " line, the message with
    mboxrd "From " quoting, and one blank separator line.  Note the
    differences between the subtypes of mbox format; see
    http://qmail.org/man/man5/mbox.html
    '''
    def __init__(self, locktype='flock', filemode=0o600, environ=None):
        WriterSkeleton.__init__(self)
        self.locktype = locktype
        self.filemode = filemode
        self.environ = os.environ if environ is None else environ

    def __str__(self):
        return 'MboxWriter'

    def envelope(self, msg):
        '''Return the text to write ahead of a message that has no envelope
        "From " line of its own.
        '''
        if 'UFLINE' in self.environ:
            # qmail-local delivery without preline; qmail already wrote the
            # envelope lines into the environment
            self.log.debug('using UFLINE, RPLINE and DTLINE from the '
                           'environment\n')
            return (self.environ['UFLINE'] + self.environ.get('RPLINE', '')
                    + self.environ.get('DTLINE', ''))
        sender = (msg.get('Return-Path') or msg.get('Sender')
                  or msg.get('Reply-To') or DEFAULT_SENDER)
        return 'From %s  %s\n' % (envelope_address(str(sender)),
                                  time.asctime())

    def entry(self, msg):
        '''Return the complete mbox entry for <msg> as bytes.'''
        if msg.unixfrom is not None:
            data = msg.flatten(include_from=True, mangle_from=True)
        else:
            self.log.debug('no mbox From line, making one up\n')
            data = (self.envelope(msg).encode('utf-8', 'surrogateescape')
                    + msg.flatten(mangle_from=True))
        if not data.endswith(b'\n'):
            data += os.linesep.encode()
        # mail readers expect a blank line ahead of each "From "
        return data + os.linesep.encode()

    def _deliver(self, msg, paths):
        saved = []
        for path in paths:
            try:
                mkdir_p(os.path.dirname(path))
                append_locked(path, self.entry(msg), need_lock=True,
                              locktype=self.locktype, filemode=self.filemode)
            except ldaDeliveryError as o:
                self._failed(o)
                continue
            self.log.debug('appended message to mbox %s\n' % path)
            saved.append(os.path.abspath(path))
        return saved

#######################################
class MaildirCounter(object):
    '''Source of unique maildir filenames for one process.

    Names are "<seconds>.<pid>_<counter>.<hostname>"; the counter restarts
    at 0 whenever the clock moves to a new second.  A name is only handed
    out if no file of that name exists in the directory asked about.
    '''
    def __init__(self, clock=None, hostname=None):
        self.clock = clock or time.time
        self.hostname = hostname or maildir_hostname()
        self.second = None
        self.counter = 0

    def __repr__(self):
        return 'MaildirCounter(%s, %d)' % (self.second, self.counter)

    def unique_name(self, directory, reset=False):
        now = int(self.clock())
        if reset or now != self.second:
            self.second = now
            self.counter = 0
        while True:
            name = '%d.%d_%d.%s' % (self.second, os.getpid(), self.counter,
                                    self.hostname)
            self.counter += 1
            if not os.path.lexists(os.path.join(directory, name)):
                return name

#######################################
class MaildirWriter(WriterSkeleton):
    '''Maildir destination.

    The message is written once, into the tmp/ directory of the first target
    maildir that accepts it, then hardlinked into new/ of every target, so
    multiple maildirs share one file.  A target on another filesystem gets
    its own copy.  See http://cr.yp.to/proto/maildir.html

    With one_for_all, targets are flat directories without tmp/new/cur.
    '''
    def __init__(self, one_for_all=False, filemode=0o600, counter=None):
        WriterSkeleton.__init__(self)
        self.one_for_all = one_for_all
        self.filemode = filemode
        self.counter = counter or MaildirCounter()

    def __str__(self):
        return 'MaildirWriter'

    def _subdirs(self, maildir):
        if self.one_for_all:
            return (maildir, )
        return tuple(os.path.join(maildir, sub) for sub in ('tmp', 'new',
                                                            'cur'))

    def _tmpdir(self, maildir):
        return self.one_for_all and maildir or os.path.join(maildir, 'tmp')

    def _newdir(self, maildir):
        return self.one_for_all and maildir or os.path.join(maildir, 'new')

    def _prepare(self, msg):
        # mutt won't add a Lines: header to maildir messages, so do it here
        if not msg.get('Lines'):
            lines = msg.body_line_count()
            msg.add_header('Lines', str(lines))
            self.log.debug('added Lines: %d header\n' % lines)
        if msg.unixfrom is not None:
            self.log.debug('stripping mbox From line for maildir\n')
            msg.strip_unixfrom()

    def _write_tmp(self, maildirs, data):
        '''Write <data> into tmp/ of the first maildir that takes it.  Return
        the path of the file written, or None.
        '''
        for maildir in maildirs:
            try:
                mkdir_p(*self._subdirs(maildir))
            except ldaDeliveryError as o:
                self._failed(o)
                continue
            tmpdir = self._tmpdir(maildir)
            tmp_path = os.path.join(tmpdir, self.counter.unique_name(tmpdir))
            self.log.debug('writing to %s\n' % tmp_path)
            try:
                append_locked(tmp_path, data, need_lock=False,
                              filemode=self.filemode, exclusive=True)
                return tmp_path
            except ldaDeliveryError as o:
                self._failed(o)
                if not isinstance(o, ldaOpenError):
                    try:
                        os.unlink(tmp_path)
                    except OSError:
                        pass
        return None

    def _deliver(self, msg, paths, direct=False):
        self._prepare(msg)
        maildirs = [path[:-1] if path.endswith('/') else path
                    for path in paths]

        tmp_path = self._write_tmp(maildirs, msg.flatten())
        if tmp_path is None:
            self._failed(ldaNoWritableTarget('unable to write to any of %s'
                                             % ', '.join(paths)))
            return []

        saved = []
        for maildir in maildirs:
            try:
                mkdir_p(*self._subdirs(maildir))
            except ldaDeliveryError as o:
                self._failed(o)
                continue
            newdir = self._newdir(maildir)
            new_path = os.path.join(newdir,
                                    self.counter.unique_name(newdir, reset=True))
            self.log.debug('hardlinking to %s\n' % new_path)
            try:
                os.link(tmp_path, new_path)
            except OSError as o:
                if o.errno == errno.EXDEV and not direct:
                    self._failed(ldaCrossDeviceLink(
                        'cannot link %s to %s (%s); delivering directly to %s'
                        % (tmp_path, new_path, o, maildir)))
                    saved.extend(self._deliver(msg, [maildir], direct=True))
                else:
                    self._failed(ldaDeliveryError('cannot link %s to %s (%s)'
                                                  % (tmp_path, new_path, o)))
                continue
            saved.append(os.path.abspath(new_path))

        try:
            os.unlink(tmp_path)
        except OSError as o:
            self._failed(ldaUnlinkError('cannot unlink %s (%s)'
                                        % (tmp_path, o)))
        return saved

#######################################
class MHWriter(WriterSkeleton):
    '''MH folder destination.  Not implemented: MH folders are recognized
    but nothing is written, and no path is reported as saved.
    '''
    def __str__(self):
        return 'MHWriter'

    def _deliver(self, msg, paths):
        self.log.warning('%s: MH delivery not implemented, skipping %s\n'
                         % (self, ', '.join(paths)))
        return []

#######################################
class MsgprefixWriter(WriterSkeleton):
    '''$MSGPREFIX directory destination.  Not implemented, like MHWriter.
    '''
    def __str__(self):
        return 'MsgprefixWriter'

    def _deliver(self, msg, paths):
        self.log.warning('%s: msgprefix delivery not implemented, skipping '
                         '%s\n' % (self, ', '.join(paths)))
        return []
