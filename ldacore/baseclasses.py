# docs/COPYING 2a + DRY: https://github.com/getmail6/getmail6
# Please refer to the git history regarding who changed what and when in this file.

'''Base classes used elsewhere in the package.

'''

__all__ = [
    'ConfigurableBase',
    'ConfInstance',
    'ConfString',
    'ConfBool',
    'ConfTriState',
    'ConfFileMode',
    'ConfLockType',
]

from ldacore.exceptions import *
import ldacore.logging
from ldacore.utilities import *

#
# Configuration items
#

class ConfItem:
    def __init__(self, name, dtype, default=None, required=True):
        self.log = ldacore.logging.Logger()
        self.name = name
        self.dtype = dtype
        self.default = default
        self.required = required

    def validate(self, configuration, val=None):
        if val is None:
            # If not passed in by subclass
            val = configuration.get(self.name, None)
        if val is None:
            # Not provided.
            if self.required:
                raise ldaConfigurationError(
                    '%s: missing required configuration parameter' % self.name
                )
            # Use default.
            return self.default
        if not isinstance(val, self.dtype) and val != self.default:
            # Got value, but not of expected type.  Try to convert.
            self.log.debug('converting %s (%s) to type %s\n'
                           % (self.name, val, self.dtype))
            try:
                val = self.convert(val)
            except (ValueError, TypeError) as o:
                raise ldaConfigurationError(
                    '%s: configuration value (%s) not of required type %s (%s)'
                    % (self.name, val, self.dtype, o)
                )
        return val

    def convert(self, val):
        return self.dtype(val)

class ConfInstance(ConfItem):
    def __init__(self, name, default=None, required=True):
        ConfItem.__init__(self, name, object, default=default,
                          required=required)

class ConfString(ConfItem):
    def __init__(self, name, default=None, required=True):
        ConfItem.__init__(self, name, str, default=default, required=required)

class ConfBool(ConfItem):
    def __init__(self, name, default=None, required=True):
        ConfItem.__init__(self, name, bool, default=default, required=required)

    def convert(self, val):
        return eval_bool(val)

class ConfTriState(ConfBool):
    '''A boolean which may also be left unset (None), meaning "no opinion".'''
    def __init__(self, name):
        ConfBool.__init__(self, name, default=None, required=False)

class ConfFileMode(ConfItem):
    '''Octal permission bits, given as a string ("0600") or an int.'''
    def __init__(self, name, default='0600', required=False):
        ConfItem.__init__(self, name, int, default=default, required=required)

    def validate(self, configuration):
        val = ConfItem.validate(self, configuration)
        if isinstance(val, str):
            try:
                val = int(val, 8)
            except ValueError as o:
                raise ldaConfigurationError('%s: %s not valid (%s)'
                                            % (self.name, val, o))
        if not 0 <= val <= 0o7777:
            raise ldaConfigurationError('%s: %o out of range'
                                        % (self.name, val))
        return val

    def convert(self, val):
        return int(val, 8)

class ConfLockType(ConfString):
    def __init__(self, name, default='flock', required=False):
        ConfString.__init__(self, name, default=default, required=required)

    def validate(self, configuration):
        val = ConfString.validate(self, configuration)
        if val not in ('lockf', 'flock'):
            raise ldaConfigurationError('%s: unknown lock type: %s'
                                        % (self.name, val))
        return val


#######################################
class ConfigurableBase(object):
    '''Base class for user-configurable classes.

    Sub-classes must provide the following data attributes and methods:

      _confitems - a tuple of ConfItem instances describing the parameters
                   the class takes: name, expected type, default, and whether
                   the parameter is required.

      initialize(self) - process instantiation parameters from self.conf.
                         Raise ldaConfigurationError on errors.
    '''

    def __init__(self, **args):
        self.log = ldacore.logging.Logger()
        self.log.trace()
        self.conf = {}
        allowed_params = set([item.name for item in self._confitems])
        for (name, value) in args.items():
            if not name in allowed_params:
                self.log.warning('Warning: ignoring unknown parameter "%s" '
                                 '(value: %s)\n' % (name, value))
                continue
            self.log.trace('setting %s to "%s" (%s)\n'
                           % (name, value, type(value)))
            self.conf[name] = value
        self.__confchecked = False
        self.checkconf()
        self.initialize()

    def checkconf(self):
        self.log.trace()
        if self.__confchecked:
            return
        for item in self._confitems:
            self.log.trace('checking %s\n' % item.name)
            self.conf[item.name] = item.validate(self.conf)
        self.__confchecked = True
        self.log.trace('done\n')

    def initialize(self):
        pass

    def _confstring(self):
        self.log.trace()
        confstring = ''
        for name in list(sorted(self.conf.keys())):
            if name.lower() == 'environ':
                continue
            if confstring:
                confstring += ', '
            confstring += '%s="%s"' % (name, self.conf[name])
        return confstring

    def showconf(self):
        self.log.info('%s(%s)\n' % (self.__class__.__name__,
                                    self._confstring()))
