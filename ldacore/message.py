# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''The ldacore Message class.

'''

__all__ = [
    'Message',
]

import os
import re
import copy
import email.errors as Errors
import email.parser as Parser
from email.header import Header

from ldacore.exceptions import *

_NL = os.linesep.encode()

RE_FROMLINE = re.compile(br'^(>*From )', re.MULTILINE)
RE_QUOTED_FROMLINE = re.compile(r'^>(>*From )', re.MULTILINE)
RE_BODY_SEPARATOR = re.compile(br'\r?\n\r?\n')

#######################################
class Message(object):
    '''Message class for ldacore.  Provides the interfaces delivery needs to
    an underlying email.message.Message() object: ordered header fields, the
    mbox envelope "From " line, the body line count, and the flattened wire
    format.
    '''
    __slots__ = (
        '__msg',
    )
    def __init__(self, fromlines=None, fromstring=None, fromfile=None):
        parser = Parser.BytesParser()

        # fromlines is a list of lines as handed to us by a caller that
        # already split the message up; fromstring is the whole message;
        # fromfile is an open binary file (i.e. stdin).
        try:
            if fromlines is not None:
                lines = [_tobytes(line).rstrip(b'\r\n') for line in fromlines]
                self.__msg = parser.parsebytes(_NL.join(lines) + _NL)
            elif fromstring is not None:
                self.__msg = parser.parsebytes(_tobytes(fromstring))
            elif fromfile is not None:
                self.__msg = parser.parse(fromfile)
            else:
                raise ldaConfigurationError('Message() called without data')
        except Errors.MessageError as o:
            raise ldaConfigurationError('failed to parse message (%s)' % o)

    def content(self):
        return self.__msg

    def copy(self):
        '''Return an independent copy; changes to it do not affect self.'''
        other = Message.__new__(Message)
        other.__msg = copy.deepcopy(self.__msg)
        return other

    @property
    def unixfrom(self):
        '''The mbox envelope "From " line without line ending, or None.'''
        return self.__msg.get_unixfrom()

    def strip_unixfrom(self):
        '''Remove the envelope "From " line and undo one level of mboxrd
        ">From " quoting in the body.
        '''
        if self.__msg.get_unixfrom() is None:
            return
        self.__msg.set_unixfrom(None)
        for part in self.__msg.walk():
            payload = part.get_payload()
            if isinstance(payload, str):
                part.set_payload(RE_QUOTED_FROMLINE.sub(r'\1', payload))

    def flatten(self, include_from=False, mangle_from=False):
        '''Return the message as bytes with native EOL convention.

        With include_from, the envelope "From " line (if the message has one)
        is written first.  With mangle_from, body lines matching "^>*From "
        get one more ">" (mboxrd quoting); the email generator's own mangling
        only handles "From ", so it is done here instead.
        '''
        strmsg = self.__msg.as_bytes(
            unixfrom=False, policy=self.__msg.policy.clone(linesep=os.linesep))
        if mangle_from:
            strmsg = RE_FROMLINE.sub(b'>\\1', strmsg)
        if include_from and self.unixfrom is not None:
            strmsg = self.unixfrom.encode('utf-8', 'surrogateescape') + _NL \
                + strmsg
        return strmsg

    def body_line_count(self):
        '''Number of lines after the header/body separator.'''
        parts = RE_BODY_SEPARATOR.split(self.flatten(), 1)
        if len(parts) < 2:
            return 0
        return len(parts[1].splitlines())

    def add_header(self, name, content):
        content = content.rstrip()
        if content.isascii():
            self.__msg[name] = content
        else:
            self.__msg[name] = Header(content, 'utf-8')

    def remove_header(self, name):
        del self.__msg[name]

    def headers(self):
        return self.__msg._headers

    def get(self, name, failobj=None):
        return self.__msg.get(name, failobj)

    def get_all(self, name, failobj=None):
        return self.__msg.get_all(name, failobj)

#######################################
def _tobytes(data):
    if isinstance(data, str):
        return data.encode('utf-8', 'surrogateescape')
    return data
