# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Logging support for ldacore.

A delivery agent is usually run by an MTA with stdout and stderr captured
into bounce messages or the mail log, so output has to be routed by level
to specific streams (i.e. trace to a debug file, warnings to stderr).  The
standard logging module's handler/level model is more than is needed here.
'''

__all__ = [
    'Logger',
]

import sys
import os.path
import traceback

from ldacore.constants import *

_levelnames = {
    TRACE : 'trace',
    DEBUG : 'debug',
    MOREINFO : 'moreinfo',
    INFO : 'info',
    WARNING : 'warning',
    ERROR : 'error',
    CRITICAL : 'critical',
}

#######################################
class _Handler(object):
    '''One output stream and the range of levels written to it.'''
    def __init__(self, stream, minlevel, maxlevel=CRITICAL, prefix=False):
        self.stream = stream
        self.minlevel = minlevel
        self.maxlevel = maxlevel
        self.prefix = prefix
        self.newline = True

    def accepts(self, msglevel):
        return self.minlevel <= msglevel <= self.maxlevel

    def emit(self, msglevel, msgtxt):
        if self.prefix and self.newline:
            msgtxt = '%s: %s' % (_levelnames[msglevel], msgtxt)
        self.stream.write(msgtxt)
        self.stream.flush()
        self.newline = msgtxt.endswith('\n')

#######################################
class _Logger(object):
    '''Class for logging.  Do not instantiate directly; use Logger() instead,
    to keep this a singleton.
    '''
    def __init__(self):
        '''Create a logger.'''
        self.handlers = []
        self.fallback = None

    def __call__(self):
        return self

    def addhandler(self, stream, minlevel, maxlevel=CRITICAL, prefix=False):
        '''Add a handler for logged messages.

        Logged messages of at least level <minlevel> (and at most level
        <maxlevel>, default CRITICAL) will be output to <stream>.  With
        <prefix>, each line starts with the name of its level.

        If no handlers are specified, messages of level WARNING and above will
        be output to stderr.
        '''
        self.handlers.append(_Handler(stream, minlevel, maxlevel, prefix))

    def clearhandlers(self):
        '''Clear the list of handlers.'''
        self.handlers = []

    def log(self, msglevel, msgtxt):
        '''Log a message of level <msglevel> containing text <msgtxt>.'''
        if isinstance(msgtxt, bytes):
            msgtxt = msgtxt.decode('utf-8', 'replace')
        handlers = self.handlers
        if not handlers:
            if msglevel < WARNING:
                return
            # stderr may have been replaced since import time
            if self.fallback is None or self.fallback.stream is not sys.stderr:
                self.fallback = _Handler(sys.stderr, WARNING, prefix=True)
            handlers = [self.fallback]
        for handler in handlers:
            if handler.accepts(msglevel):
                handler.emit(msglevel, msgtxt)

    def trace(self, msg='trace\n'):
        '''Log a message with level TRACE.

        The message will be prefixed with filename, line number, and function
        name of the calling code.
        '''
        trace = traceback.extract_stack()[-2]
        msg = '%s [%s:%i] %s' % (trace[FUNCNAME] + '()',
            os.path.basename(trace[FILENAME]),
            trace[LINENO],
            msg
        )
        self.log(TRACE, msg)

    def debug(self, msg):
        '''Log a message with level DEBUG.'''
        self.log(DEBUG, msg)

    def moreinfo(self, msg):
        '''Log a message with level MOREINFO.'''
        self.log(MOREINFO, msg)

    def info(self, msg):
        '''Log a message with level INFO.'''
        self.log(INFO, msg)

    def warning(self, msg):
        '''Log a message with level WARNING.'''
        self.log(WARNING, msg)

    def error(self, msg):
        '''Log a message with level ERROR.'''
        self.log(ERROR, msg)

    def critical(self, msg):
        '''Log a message with level CRITICAL.'''
        self.log(CRITICAL, msg)

    # aliases
    warn = warning

Logger = _Logger()
