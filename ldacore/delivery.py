# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Delivering one message to any number of local mailboxes.

  msg = LocalDelivery(open('/dev/stdin', 'rb'), emergency='~/Mail/emergency/')
  saved = msg.deliver('~/Mail/inbox', '~/Maildir/', '~/Mail/lists/')
  sys.exit(delivery_status(saved))

Destinations are sorted into kinds of mailbox (see ldacore.mailboxes) and
each kind handed to its writer (see ldacore.destinations).  If nothing at
all could be saved, the emergency mailbox is tried once.
'''

__all__ = [
    'LocalDelivery',
    'delivery_status',
]

import os

from ldacore.exceptions import *
from ldacore.constants import *
from ldacore.baseclasses import *
from ldacore.utilities import *
from ldacore.mailboxes import *
from ldacore.destinations import *
from ldacore.message import Message

#######################################
def delivery_status(saved):
    '''Map the result of LocalDelivery.deliver() to a process exit code:
    DELIVERED if the message was saved anywhere, else DEFERRED so the MTA
    retries later.
    '''
    if saved:
        return DELIVERED
    return DEFERRED

#######################################
def _as_message(data):
    if isinstance(data, Message):
        return data
    if isinstance(data, (bytes, str)):
        return Message(fromstring=data)
    if isinstance(data, (list, tuple)):
        return Message(fromlines=data)
    if hasattr(data, 'read'):
        return Message(fromfile=data)
    raise ldaConfigurationError('data was neither a message nor something '
                                'a message can be read from (%s)' % type(data))

#######################################
class LocalDelivery(ConfigurableBase):
    '''A message, ready to be delivered to local mailboxes.

    Parameters:

      emergency - mailbox to try when no destination could be written to.
            Defaults to the default mailbox (see default_mailbox()).

      one_for_all (boolean) - deliver to maildirs as flat directories,
            without tmp/new/cur.  Defaults to False.

      interpolate_strftime (boolean) - expand strftime(3) "%" sequences in
            destination names.  Defaults to False, as correspondents'
            usernames used as folder names may contain "%".

      assume_msgprefix (boolean, optional) - whether an existing directory
            that is not a maildir is a msgprefix folder.  If unset, the
            process-wide ldacore.mailboxes.ASSUME_MSGPREFIX decides.

      locktype - "flock" (default) or "lockf", for mbox files.

      filemode - permissions of new mbox and maildir files.  Default "0600".

      environ - environment to read MAIL and UFLINE/RPLINE/DTLINE from.
            Defaults to os.environ.

      counter - a MaildirCounter to share with other instances.

    deliver() works on a copy of the message, so adding a Lines: header or
    removing the envelope "From " line for a maildir never shows in the
    caller's message or in a later deliver() call.
    '''
    _confitems = (
        ConfString(name='emergency', required=False, default=None),
        ConfBool(name='one_for_all', required=False, default=False),
        ConfBool(name='interpolate_strftime', required=False, default=False),
        ConfTriState(name='assume_msgprefix'),
        ConfLockType(name='locktype'),
        ConfFileMode(name='filemode'),
        ConfInstance(name='environ', required=False, default=None),
        ConfInstance(name='counter', required=False, default=None),
    )

    def __init__(self, data, **args):
        self.message = _as_message(data)
        ConfigurableBase.__init__(self, **args)

    def initialize(self):
        self.log.trace()
        if self.conf['environ'] is None:
            self.conf['environ'] = os.environ
        self.default_mailbox = default_mailbox(self.conf['environ'])
        if not self.conf['emergency']:
            self.conf['emergency'] = self.default_mailbox
        self.writers = {
            MailboxKind.MAILDIR : MaildirWriter(self.conf['one_for_all'],
                                                self.conf['filemode'],
                                                self.conf['counter']),
            MailboxKind.MBOX : MboxWriter(self.conf['locktype'],
                                          self.conf['filemode'],
                                          self.conf['environ']),
            MailboxKind.MH : MHWriter(),
            MailboxKind.MSGPREFIX : MsgprefixWriter(),
        }
        self.errors = []

    def __str__(self):
        self.log.trace()
        return 'LocalDelivery (%s)' % self._confstring()

    def _dispatch(self, msg, paths):
        saved = []
        groups = classify_all(paths, self.conf['assume_msgprefix'])
        for kind in sorted(groups, key=lambda kind: kind.value):
            writer = self.writers[kind]
            targets = [target.path for target in groups[kind]]
            self.log.debug('calling %s for %s\n' % (writer, targets))
            saved.extend(writer.deliver(msg, targets))
            self.errors.extend(writer.errors)
        return saved

    def deliver(self, *destinations):
        '''Deliver the message to each of <destinations> (or the default
        mailbox if none are given), returning the list of absolute paths of
        the files written.  An empty list means the message was saved
        nowhere, not even in the emergency mailbox.
        '''
        self.log.trace()
        self.errors = []
        msg = self.message.copy()
        paths = [interpolate_path(path, self.conf['interpolate_strftime'])
                 for path in destinations]
        if not paths:
            if self.default_mailbox is None:
                self.log.error('no destination given and no default mailbox '
                               'found\n')
            else:
                paths = [self.default_mailbox]
        self.log.debug('delivering to %s\n' % paths)

        saved = self._dispatch(msg, paths)
        if saved:
            return saved

        emergency = self.conf['emergency']
        if emergency is None:
            return []
        emergency = interpolate_path(emergency,
                                     self.conf['interpolate_strftime'])
        if emergency in paths:
            self.errors.append(ldaEmergencyExhausted(
                'unable to write to %s, which is also the emergency mailbox'
                % emergency))
            self.log.error('%s\n' % self.errors[-1])
            return []
        self.log.warning('unable to write to %s, trying emergency mailbox '
                         '%s\n' % (', '.join(paths) or 'anything', emergency))
        saved = self._dispatch(msg, [emergency])
        if not saved:
            self.errors.append(ldaEmergencyExhausted(
                'unable to write to %s or to emergency mailbox %s'
                % (', '.join(paths) or 'anything', emergency)))
            self.log.error('%s\n' % self.errors[-1])
        return saved
