# -*- coding: utf-8 -*-

# Copyright (C) 2009, 2012-2018  Red Hat, Inc.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Library General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program; if not, write to the Free Software
# Foundation, Inc., 51 Franklin Street, Fifth Floor, Boston, MA 02110-1301 USA.
#


import calendar
import os
import time

from swdb.db.group import EnvironmentPersistor, GroupPersistor, RPMTransaction
from swdb.db.swdb import Swdb
from swdb.db.transformer import Transformer
from swdb.db.types import TransactionItemAction, TransactionItemReason
from swdb.i18n import ucd
from swdb.util import logger

import swdb.const
import swdb.logging
import swdb.rpm
import swdb.util


class HistoryTransaction(object):
    """A stored transaction as history listings show it.

    Attributes not defined here are read from the underlying Transaction.
    """

    altered_lt_rpmdb = False
    altered_gt_rpmdb = False

    def __init__(self, trans):
        self._trans = trans

    def __getattr__(self, name):
        return getattr(self._trans, name)

    def __repr__(self):
        return "<%s %d>" % (self.__class__.__name__, self.tid)

    @property
    def tid(self):
        return self._trans.id

    @property
    def return_code(self):
        return int(not self._trans.done)

    @property
    def is_output(self):
        return bool(self._trans.get_console_output())

    def packages(self):
        return self._trans.get_items()

    def performed_with(self):
        return sorted(self._trans.get_software_performed_with(), key=str)

    def _lines(self, file_descriptor):
        return [line for fd, line in self._trans.get_console_output() if fd == file_descriptor]

    def output(self):
        return self._lines(swdb.const.CONSOLE_STDOUT)

    def error(self):
        return self._lines(swdb.const.CONSOLE_STDERR)


def _pkg_nevra(pkg):
    return str(swdb.rpm.Nevra(pkg.name, int(pkg.epoch or 0), pkg.version, pkg.release,
                              pkg.arch))


class SwdbInterface(object):
    """History of one persistdir, opened on first use."""

    def __init__(self, db_dir, releasever=""):
        self.releasever = str(releasever)
        self._db_dir = db_dir
        self._swdb = None
        self._logging = swdb.logging.Logging()
        self._reset()

    def __del__(self):
        self.close()

    @classmethod
    def from_conf(cls, conf):
        """Open the history in conf.persistdir and set up logging as configured."""
        history = cls(conf.persistdir, releasever=conf.releasever)
        history._logging._setup_from_conf(conf)
        return history

    def _reset(self):
        self.rpm = RPMTransaction(self)
        self.group = GroupPersistor(self)
        self.env = EnvironmentPersistor(self)
        # scriptlet output is kept in memory until end()
        self._output = []
        self._tid = None

    @property
    def dbpath(self):
        return os.path.join(self._db_dir, Swdb.default_database_name)

    @property
    def path(self):
        return self.swdb.path

    @property
    def swdb(self):
        if self._swdb is None:
            swdb.util.ensure_dir(self._db_dir)
            self._swdb = Swdb(self.dbpath)
            self._swdb.init_transaction()
        return self._swdb

    def _ensure_transaction(self):
        """Facade with a transaction in progress, a new one if the last has ended."""
        if self.swdb.get_current() is None:
            self.swdb.init_transaction()
        return self.swdb

    def close(self):
        if self._swdb is not None:
            self._swdb.close_transaction()
            self._swdb.close_database()
            self._swdb = None
        self._reset()

    def reset_db(self):
        self.swdb.reset_database()

    def transform(self, input_dir):
        Transformer(input_dir, self.dbpath).transform()

    def last(self):
        trans = self.swdb.get_last_transaction()
        return None if trans is None else HistoryTransaction(trans)

    def old(self, tids=None, limit=0):
        """Stored transactions, newest first.

        Neighbours whose rpmdb versions don't chain get the altered flags set:
        something changed the rpmdb between them.
        """
        wanted = set(int(tid) for tid in tids or ())
        result = [HistoryTransaction(trans) for trans in self.swdb.list_transactions()
                  if not wanted or trans.id in wanted]
        for older, newer in zip(result, result[1:]):
            if newer.rpmdb_version_begin != older.rpmdb_version_end:
                newer.altered_lt_rpmdb = True
                older.altered_gt_rpmdb = True
        result.reverse()
        if limit:
            result = result[:limit]
        return result

    def get_current(self):
        current = self.swdb.get_current()
        return None if current is None else HistoryTransaction(current)

    def pkg_to_swdb_rpm_item(self, pkg):
        rpm_item = self.swdb.create_rpm_item()
        rpm_item.name = pkg.name
        rpm_item.epoch = int(pkg.epoch or 0)
        rpm_item.version = pkg.version
        rpm_item.release = pkg.release
        rpm_item.arch = pkg.arch
        return rpm_item

    def repo(self, pkg):
        return self.swdb.get_rpm_repo(_pkg_nevra(pkg))

    def package_data(self, pkg):
        """Latest transaction item of the exact package, None if never recorded."""
        return self.swdb.get_rpm_transaction_item(_pkg_nevra(pkg))

    def set_reason(self, pkg, reason):
        # :api
        db = self._ensure_transaction()
        ti = db.add_item(self.pkg_to_swdb_rpm_item(pkg), self.repo(pkg),
                         TransactionItemAction.REASON_CHANGE, reason)
        ti.done = True
        return ti

    def beg(self, rpmdb_version, using_pkgs=(), cmdline=None):
        db = self._ensure_transaction()
        for pkg in using_pkgs:
            db.add_software_performed_with(self.pkg_to_swdb_rpm_item(pkg))
        db.set_releasever(self.releasever)
        self._tid = db.begin_transaction(int(calendar.timegm(time.gmtime())),
                                         str(rpmdb_version), cmdline or "",
                                         int(swdb.util.getloginuid()))
        return self._tid

    def log_scriptlet_output(self, msg):
        if self._tid is None or not msg:
            return
        self._output.extend((swdb.const.CONSOLE_STDOUT, ucd(line))
                            for line in msg.splitlines())

    def end(self, end_rpmdb_version="", return_code=None):
        if self._tid is None:
            # beg() failed or was never called
            return
        if return_code is None:
            return_code = int(not all(ti.done for ti in self.rpm))
        for file_descriptor, line in self._output:
            self.swdb.add_console_output_line(file_descriptor, line)
        self._output = []
        tid = self.swdb.end_transaction(int(time.time()), str(end_rpmdb_version),
                                        return_code == 0)
        logger.debug("History transaction %d ended with return code %d", tid, return_code)
        self._tid = None

    def search(self, patterns):
        """Ids of transactions with packages matching any of the patterns."""
        return self.swdb.search_transactions_by_rpm(patterns)

    def _reason(self, pkg, max_transaction_id=-1):
        return self.swdb.resolve_rpm_transaction_item_reason(pkg.name, pkg.arch,
                                                             max_transaction_id)

    def user_installed(self, pkg):
        # a package with no recorded reason most likely came from plain rpm
        return self._reason(pkg) in (TransactionItemReason.USER,
                                     TransactionItemReason.UNKNOWN)

    def get_erased_reason(self, pkg, first_trans, rollback):
        """Reason pkg had before the transactions being undone.

        An unknown reason counts as USER.
        """
        reason = self._reason(pkg, first_trans if rollback else -1)
        if reason == TransactionItemReason.UNKNOWN:
            return TransactionItemReason.USER
        return reason
