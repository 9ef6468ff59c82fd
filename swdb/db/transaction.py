# -*- coding: utf-8 -*-

# Copyright (C) 2017-2018 Red Hat, Inc.
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

import functools

from swdb.db.item import CompsEnvironmentItem, CompsGroupItem, RPMItem
from swdb.db.transactionitem import TransactionItem, link_replaced_by
from swdb.i18n import _
from swdb.util import logger

import swdb.exceptions


@functools.total_ordering
class Transaction(object):
    """A recorded transaction.

    Transactions are ordered by (id, dt_begin, rpmdb_version_begin).
    """

    def __init__(self, conn, pk=None):
        self.conn = conn
        self.id = 0
        self.dt_begin = 0
        self.dt_end = 0
        self.rpmdb_version_begin = ""
        self.rpmdb_version_end = ""
        self.releasever = ""
        self.user_id = 0
        self.cmdline = ""
        self.done = False
        self._items = None
        if pk is not None:
            self._db_select(pk)

    def _key(self):
        return (self.id, self.dt_begin, self.rpmdb_version_begin)

    def __eq__(self, other):
        if not isinstance(other, Transaction):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, Transaction):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return "<%s %d>" % (self.__class__.__name__, self.id)

    def _db_select(self, pk):
        row = self.conn.select_one(
            """SELECT dt_begin, dt_end, rpmdb_version_begin, rpmdb_version_end,
                      releasever, user_id, cmdline, done
               FROM trans WHERE id = ?""", (pk,))
        if row is None:
            raise swdb.exceptions.DatabaseError(_("Transaction %d not found.") % pk)
        self.id = pk
        self.dt_begin = row['dt_begin']
        self.dt_end = row['dt_end'] or 0
        self.rpmdb_version_begin = row['rpmdb_version_begin'] or ""
        self.rpmdb_version_end = row['rpmdb_version_end'] or ""
        self.releasever = row['releasever']
        self.user_id = row['user_id']
        self.cmdline = row['cmdline'] or ""
        self.done = bool(row['done'])

    def _load_items(self):
        result = []
        for item_class in (RPMItem, CompsGroupItem, CompsEnvironmentItem):
            result.extend(item_class.get_transaction_items(self.conn, self.id))
        result.sort(key=lambda ti: ti.id)
        for ti in result:
            ti.trans = self
        link_replaced_by(self.conn, result)
        return result

    def get_items(self):
        if self._items is None:
            self._items = self._load_items()
        return self._items

    def get_software_performed_with(self):
        rows = self.conn.select(
            "SELECT item_id FROM trans_with WHERE trans_id = ? ORDER BY id", (self.id,))
        return set(RPMItem(self.conn, row['item_id']) for row in rows)

    def get_console_output(self):
        rows = self.conn.select(
            """SELECT file_descriptor, line FROM console_output
               WHERE trans_id = ? ORDER BY id""", (self.id,))
        return [(row['file_descriptor'], row['line']) for row in rows]


class WritableTransaction(Transaction):
    """Transaction being recorded: NEW until begin(), CLOSED after finish()."""

    def __init__(self, conn):
        super(WritableTransaction, self).__init__(conn)
        self._items = []
        self._software_performed_with = []
        self._finished = False

    def begin(self):
        if self.id != 0:
            raise swdb.exceptions.UsageError(_("Transaction has already begun!"))
        self._db_insert()
        self.save_items()

    def finish(self, success):
        if self.id == 0:
            raise swdb.exceptions.UsageError(_("Transaction has not begun!"))
        if self._finished:
            raise swdb.exceptions.UsageError(_("Transaction has already finished!"))
        self.done = bool(success)
        self._db_update()
        self.save_items()
        self._finished = True
        logger.debug("Transaction %d finished, done: %s", self.id, self.done)

    def _db_insert(self, keep_id=False):
        self.conn.execute(
            """INSERT INTO trans (id, dt_begin, dt_end, rpmdb_version_begin,
                                  rpmdb_version_end, releasever, user_id, cmdline, done)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (self.id if keep_id and self.id else None, self.dt_begin, self.dt_end,
             self.rpmdb_version_begin, self.rpmdb_version_end, self.releasever,
             self.user_id, self.cmdline, int(self.done)))
        self.id = self.conn.last_insert_row_id()
        for software in self._software_performed_with:
            software.save()
            self.conn.execute(
                "INSERT OR IGNORE INTO trans_with (trans_id, item_id) VALUES (?, ?)",
                (self.id, software.id))

    def _db_update(self):
        self.conn.execute(
            """UPDATE trans
               SET dt_begin = ?, dt_end = ?, rpmdb_version_begin = ?, rpmdb_version_end = ?,
                   releasever = ?, user_id = ?, cmdline = ?, done = ?
               WHERE id = ?""",
            (self.dt_begin, self.dt_end, self.rpmdb_version_begin, self.rpmdb_version_end,
             self.releasever, self.user_id, self.cmdline, int(self.done), self.id))

    def save_items(self):
        # replaced-by links need ids of both sides
        for ti in self._items:
            ti.save()
        for ti in self._items:
            ti.save_replaced_by()

    def add_item(self, item, repoid, action, reason):
        ti = TransactionItem(self.conn, self)
        ti.item = item
        ti.repoid = repoid
        ti.action = action
        ti.reason = reason
        self._items.append(ti)
        return ti

    def add_software_performed_with(self, software):
        if software not in self._software_performed_with:
            self._software_performed_with.append(software)

    def get_software_performed_with(self):
        return set(self._software_performed_with)

    def add_console_output_line(self, file_descriptor, line):
        if not self.id:
            raise swdb.exceptions.UsageError(
                _("Can't add console output to unsaved transaction"))
        self.conn.execute(
            """INSERT INTO console_output (trans_id, file_descriptor, line)
               VALUES (?, ?, ?)""", (self.id, file_descriptor, line))
