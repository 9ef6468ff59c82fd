# logging.py
# swdb Logging Subsystem.
#
# Copyright (C) 2013-2018 Red Hat, Inc.
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

import logging
import logging.handlers
import os
import sys
import time

import swdb.const
import swdb.util

# :api the logger is 'swdb'

SUPERCRITICAL = 100 # nothing is logged at this level
CRITICAL = logging.CRITICAL
ERROR = logging.ERROR
WARNING = logging.WARNING
INFO = logging.INFO
DEBUG = logging.DEBUG
DDEBUG = 8
SUBDEBUG = 6
TRACE = 4

_LEVEL_NAMES = ((DDEBUG, "DDEBUG"), (SUBDEBUG, "SUBDEBUG"), (TRACE, "TRACE"))

# debuglevel/logfilelevel option value -> logging level
_CONF_LEVELS = (SUPERCRITICAL, INFO, INFO, DEBUG, DEBUG, DEBUG, DEBUG,
                DDEBUG, SUBDEBUG, TRACE, TRACE)


def _cfg_verbose_val2level(value):
    assert 0 <= value < len(_CONF_LEVELS)
    return _CONF_LEVELS[value]


def only_once(func):
    """Method decorator turning the method into noop on second or later calls."""
    def noop(*_args, **_kwargs):
        pass
    def swan_song(self, *args, **kwargs):
        func(self, *args, **kwargs)
        setattr(self, func.__name__, noop)
    return swan_song


def _file_handler(logdir, level, log_size, log_rotate):
    swdb.util.ensure_dir(logdir)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(logdir, swdb.const.LOG), maxBytes=log_size, backupCount=log_rotate)
    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s",
                                  "%Y-%m-%dT%H:%M:%S%z")
    formatter.converter = time.localtime
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


class Logging(object):
    """Handlers of the 'swdb' logger: console split at WARNING, optional file."""

    def __init__(self):
        self.stdout_handler = self.stderr_handler = self.file_handler = None
        for level, name in _LEVEL_NAMES:
            logging.addLevelName(level, name)

    @only_once
    def _setup(self, verbose_level, logfile_level, logdir, log_size, log_rotate):
        logger_swdb = logging.getLogger("swdb")
        logger_swdb.setLevel(TRACE)

        if logdir is not None:
            self.file_handler = _file_handler(logdir, logfile_level, log_size, log_rotate)
            logger_swdb.addHandler(self.file_handler)
            # console handlers are not attached yet, the marker goes to the file only
            logger_swdb.log(INFO, swdb.const.LOG_MARKER)

        # stdout takes everything below WARNING, stderr the rest
        self.stdout_handler = logging.StreamHandler(sys.stdout)
        self.stdout_handler.setLevel(verbose_level)
        self.stdout_handler.addFilter(lambda record: record.levelno < WARNING)
        self.stderr_handler = logging.StreamHandler(sys.stderr)
        self.stderr_handler.setLevel(WARNING)
        logger_swdb.addHandler(self.stdout_handler)
        logger_swdb.addHandler(self.stderr_handler)

    def _setup_from_conf(self, conf):
        self._setup(_cfg_verbose_val2level(conf.debuglevel),
                    _cfg_verbose_val2level(conf.logfilelevel),
                    conf.logdir, conf.log_size, conf.log_rotate)


class Timer(object):
    def __init__(self, what):
        self.what = what
        self.start = time.time()

    def __call__(self):
        diff = time.time() - self.start
        msg = 'timer: %s: %d ms' % (self.what, diff * 1000)
        logging.getLogger("swdb").log(DDEBUG, msg)
