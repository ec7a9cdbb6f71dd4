# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Deciding what kind of mailbox a destination path names.

Follows procmail's rules (see procmailrc(5), "mailbox"):

  - a name ending in "/" is a maildir; it is created if need be.
  - a name ending in "/." is an MH folder.
  - an existing directory holding tmp/ and new/ is a maildir.
  - any other existing directory is a maildir, or, if ASSUME_MSGPREFIX is
    set, a directory receiving $MSGPREFIX* files.
  - anything else is an mbox file.

Only maildir and mbox are delivered to; mh and msgprefix destinations are
classified so they can be skipped explicitly.
'''

__all__ = [
    'ASSUME_MSGPREFIX',
    'DeliveryTarget',
    'MailboxKind',
    'classify',
    'classify_all',
]

import os.path
import enum
from collections import namedtuple

import ldacore.logging

# Process-wide default for plain directories; a LocalDelivery's own
# assume_msgprefix option takes precedence when set.
ASSUME_MSGPREFIX = False

class MailboxKind(enum.Enum):
    MAILDIR = 'maildir'
    MBOX = 'mbox'
    MH = 'mh'
    MSGPREFIX = 'msgprefix'

    def __str__(self):
        return self.value

DeliveryTarget = namedtuple('DeliveryTarget', 'path kind')

#######################################
def classify(path, assume_msgprefix=None):
    '''Return the MailboxKind of <path>.

    Looks at the filesystem as it is right now; nothing is locked, so the
    answer can be stale by the time the caller acts on it.
    '''
    if path.endswith('/'):
        return MailboxKind.MAILDIR
    if path.endswith('/.'):
        return MailboxKind.MH
    if os.path.isdir(path):
        if (os.path.isdir(os.path.join(path, 'tmp'))
                and os.path.isdir(os.path.join(path, 'new'))):
            return MailboxKind.MAILDIR
        if assume_msgprefix is not None:
            if assume_msgprefix:
                return MailboxKind.MSGPREFIX
            return MailboxKind.MAILDIR
        if ASSUME_MSGPREFIX:
            return MailboxKind.MSGPREFIX
        return MailboxKind.MAILDIR
    return MailboxKind.MBOX

#######################################
def classify_all(paths, assume_msgprefix=None):
    '''Classify each of <paths>, returning a dict mapping MailboxKind to the
    list of DeliveryTarget of that kind, in the order given.
    '''
    log = ldacore.logging.Logger()
    groups = {}
    for path in paths:
        kind = classify(path, assume_msgprefix)
        log.trace('%s is of type %s\n' % (path, kind))
        groups.setdefault(kind, []).append(DeliveryTarget(path, kind))
    return groups
