# conf.py
# swdb configuration.
#
# Copyright (C) 2017-2018 Red Hat, Inc.
#
# This copyrighted material is made available to anyone wishing to use,
# modify, copy, or redistribute it subject to the terms and conditions of
# the GNU General Public License v.2, or (at your option) any later version.
# This program is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY expressed or implied, including the implied warranties of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General
# Public License for more details.  You should have received a copy of the
# GNU General Public License along with this program; if not, write to the
# Free Software Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA
# 02110-1301, USA.  Any Red Hat trademarks that are incorporated in the
# source code or documentation are not subject to the GNU General Public
# License and may only be used or replicated with the express permission of
# Red Hat, Inc.
#

"""
The configuration classes and routines in swdb are split into two parts:
the option definitions with their defaults (see `SwdbConf._OPTIONS`) and the
reading of a config file in INI format, where only the ``[main]`` section is
taken into account.

Options given to the constructor win over the values from the file.
"""

from swdb.i18n import _, ucd
import configparser
import logging
import os

import swdb.const
import swdb.exceptions

logger = logging.getLogger('swdb')


def _parse_int(value, low=None, high=None):
    value = int(value)
    if low is not None and value < low:
        raise ValueError("value %d is lower than %d" % (value, low))
    if high is not None and value > high:
        raise ValueError("value %d is greater than %d" % (value, high))
    return value


def _parse_path(value):
    if not os.path.isabs(value):
        raise ValueError("'%s' is not an absolute path" % value)
    return os.path.normpath(value)


class SwdbConf(object):
    # :api

    # name: (parser, default)
    _OPTIONS = {
        'persistdir': (_parse_path, swdb.const.PERSISTDIR),
        'logdir': (_parse_path, swdb.const.LOGDIR),
        'releasever': (ucd, ''),
        'debuglevel': (lambda v: _parse_int(v, 0, 10), 2),
        'logfilelevel': (lambda v: _parse_int(v, 0, 10), 9),
        'log_size': (lambda v: _parse_int(v, 0), swdb.const.LOG_SIZE),
        'log_rotate': (lambda v: _parse_int(v, 0), swdb.const.LOG_ROTATE),
    }

    def __init__(self, **kwargs):
        self.config_file_path = None
        for name, (_parser, default) in self._OPTIONS.items():
            setattr(self, name, default)
        self._overrides = set()
        for name, value in kwargs.items():
            self._set_value(name, value)
            self._overrides.add(name)

    def _set_value(self, name, value):
        try:
            parser = self._OPTIONS[name][0]
        except KeyError:
            raise swdb.exceptions.ConfigError(_("Unknown configuration option: %s") % name)
        if not isinstance(value, str):
            value = str(value)
        try:
            setattr(self, name, parser(value))
        except ValueError as e:
            msg = _("Invalid value for option %s: %s") % (name, ucd(e))
            raise swdb.exceptions.ConfigError(msg, raw_error=e)

    def read(self, filename=None):
        # :api
        if filename is None:
            filename = swdb.const.CONF_FILENAME
        parser = configparser.ConfigParser()
        try:
            with open(filename) as fp:
                parser.read_file(fp)
        except (IOError, OSError) as e:
            msg = _("Config file %s does not exist or can't be read") % filename
            raise swdb.exceptions.ConfigError(msg, raw_error=e)
        except configparser.Error as e:
            msg = _("Parsing file %s failed: %s") % (filename, ucd(e))
            raise swdb.exceptions.ConfigError(msg, raw_error=e)

        self.config_file_path = filename
        if not parser.has_section('main'):
            logger.warning(_("No [main] section in %s, using defaults."), filename)
            return self
        for name, value in parser.items('main'):
            if name in self._overrides:
                continue
            if name not in self._OPTIONS:
                logger.warning(_("Unknown configuration option: %s = %s in %s"),
                               name, value, filename)
                continue
            self._set_value(name, value)
        return self

    @property
    def db_path(self):
        # :api
        return os.path.join(self.persistdir, swdb.const.HISTORY_DB_NAME)

    @property
    def legacy_dir(self):
        """Directory holding the yum history and groups.json."""
        return self.persistdir
