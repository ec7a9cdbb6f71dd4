# -*- coding: utf-8 -*-
# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''A local mail delivery toolkit.

ldacore appends a message to local mailboxes the way a procmail-style
delivery agent does: Unix mbox files are written under an exclusive lock,
maildirs are written once to tmp/ and hardlinked into new/ of every target
maildir, and if no destination at all can be written to, the message goes
to an emergency mailbox instead.
'''

import sys

__version__ = '0.22.0'
__license__ = 'GNU GPL version 2'

__py_required__ = '3.8'
__py_required_hex__ = 0x30800f0

if sys.hexversion < __py_required_hex__:
    raise ImportError('ldacore version %s requires Python version %s '
                      'or later'%(__version__,__py_required__))

__all__ = [
    'baseclasses',
    'constants',
    'delivery',
    'destinations',
    'exceptions',
    'logging',
    'mailboxes',
    'message',
    'utilities',
]
