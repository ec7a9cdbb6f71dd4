# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Exceptions raised by ldacore.

Everything below ldaDeliveryError describes the failure of a single
delivery target; writers catch these, log them and move on to the next
target.
'''

__all__ = [
    'ldaError',
    'ldaConfigurationError',
    'ldaOperationError',
    'ldaDeliveryError',
    'ldaOpenError',
    'ldaLockTimeout',
    'ldaWriteError',
    'ldaUnlockError',
    'ldaCloseError',
    'ldaUnlinkError',
    'ldaCrossDeviceLink',
    'ldaNoWritableTarget',
    'ldaEmergencyExhausted',
]

# Base class for all ldacore exceptions
class ldaError(Exception):
    '''Base class for all ldacore exceptions.'''
    pass

# Specific exception classes
class ldaConfigurationError(ldaError):
    '''Exception raised when a user configuration error is detected.'''
    pass

class ldaOperationError(ldaError):
    '''Exception raised when a runtime error is detected.'''
    pass

class ldaDeliveryError(ldaOperationError):
    '''Exception raised when problems occur during message delivery.
    Subclass of ldaOperationError.
    '''
    pass

class ldaOpenError(ldaDeliveryError):
    '''The mailbox file could not be opened for appending.'''
    pass

class ldaLockTimeout(ldaDeliveryError):
    '''No exclusive lock could be obtained within the allowed attempts.'''
    pass

class ldaWriteError(ldaDeliveryError):
    '''Writing the message data failed (disk full, quota, I/O error).'''
    pass

class ldaUnlockError(ldaDeliveryError):
    pass

class ldaCloseError(ldaDeliveryError):
    pass

class ldaUnlinkError(ldaDeliveryError):
    '''The maildir temporary file could not be removed after delivery.
    Never fatal; the message was already linked into place.'''
    pass

class ldaCrossDeviceLink(ldaDeliveryError):
    '''Hardlinking into a maildir on another filesystem failed; that maildir
    gets an independent copy instead.'''
    pass

class ldaNoWritableTarget(ldaDeliveryError):
    '''Every candidate maildir refused the temporary file.'''
    pass

class ldaEmergencyExhausted(ldaDeliveryError):
    '''The emergency mailbox failed too, or had already been tried.'''
    pass
