# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

import os

# Log levels
(TRACE, DEBUG, MOREINFO, INFO, WARNING, ERROR, CRITICAL) = range(1, 8)

# Components of stack trace (indices to tuple)
FILENAME = 0
LINENO = 1
FUNCNAME = 2

# Delivery outcomes, as seen by an MTA invoking us (sysexits.h)
DELIVERED = os.EX_OK
DEFERRED = os.EX_TEMPFAIL
REJECTED = 100

# Exclusive lock on an mbox: attempts, sleeping 1, 2, ... seconds in between
LOCK_ATTEMPTS = 10

# Envelope sender used when the message names none
DEFAULT_SENDER = 'root@localhost'

# System mail spool directories, in order of preference
SPOOL_DIRS = ('/var/spool/mail/', '/var/mail/')
