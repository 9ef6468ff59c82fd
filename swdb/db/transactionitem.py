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

from swdb.db.types import (ItemType, TransactionItemAction, TransactionItemReason,
                           action_name, action_short)
from swdb.i18n import _

import swdb.exceptions


def get_repo_id(conn, repoid):
    """Return id of the repo row for repoid, inserting it when missing."""
    row = conn.select_one("SELECT id FROM repo WHERE repoid = ?", (repoid,))
    if row is not None:
        return row['id']
    conn.execute("INSERT INTO repo (repoid) VALUES (?)", (repoid,))
    return conn.last_insert_row_id()


def link_replaced_by(conn, trans_items):
    """Resolve stored replaced-by links among trans_items of one transaction."""
    by_id = dict((ti.id, ti) for ti in trans_items if ti.id)
    if not by_id:
        return
    ids = sorted(by_id)
    rows = conn.select(
        """SELECT trans_item_id, by_trans_item_id FROM item_replaced_by
           WHERE trans_item_id IN (%s)""" % ", ".join("?" * len(ids)), ids)
    for row in rows:
        replaced_by = by_id.get(row['by_trans_item_id'])
        if replaced_by is not None:
            by_id[row['trans_item_id']].replaced_by = replaced_by


class TransactionItem(object):
    """An item taking part in a transaction."""

    def __init__(self, conn, trans=None):
        self.conn = conn
        self.trans = trans
        self._trans_id = 0
        self.id = 0
        self.item = None
        self.repoid = ""
        self.action = TransactionItemAction.INSTALL
        self.reason = TransactionItemReason.UNKNOWN
        self.done = False
        self.replaced_by = None

    @classmethod
    def from_row(cls, conn, row, item):
        ti = cls(conn)
        ti.id = row['id']
        ti._trans_id = row['trans_id']
        ti.item = item
        ti.repoid = row['repoid']
        ti.action = TransactionItemAction(row['action'])
        ti.reason = TransactionItemReason(row['reason'])
        ti.done = bool(row['done'])
        return ti

    def __str__(self):
        return str(self.item)

    def __repr__(self):
        return "<%s %s %s>" % (self.__class__.__name__, self.action.name, self.item)

    @property
    def trans_id(self):
        if self.trans is not None:
            return self.trans.id
        return self._trans_id

    @property
    def action_name(self):
        return action_name(self.action)

    @property
    def action_short(self):
        return action_short(self.action)

    def _get_item(self, item_type):
        if self.item is not None and self.item.item_type == item_type:
            return self.item
        return None

    def get_rpm_item(self):
        return self._get_item(ItemType.RPM)

    def get_comps_group_item(self):
        return self._get_item(ItemType.GROUP)

    def get_comps_environment_item(self):
        return self._get_item(ItemType.ENVIRONMENT)

    def save(self):
        """Save the item and this row. Replaced-by links are stored separately."""
        if not self.trans_id:
            raise swdb.exceptions.UsageError(
                _("Transaction item can't be saved before its transaction."))
        self.item.save()
        if self.id == 0:
            self._db_insert()
        else:
            self._db_update()

    def save_replaced_by(self):
        if self.replaced_by is None:
            return
        if not self.replaced_by.id:
            raise swdb.exceptions.UsageError(
                _("Replacing transaction item of '%s' is not saved.") % self)
        self.conn.execute(
            "INSERT OR REPLACE INTO item_replaced_by VALUES (?, ?)",
            (self.id, self.replaced_by.id))

    def _db_insert(self):
        self.conn.execute(
            """INSERT INTO trans_item (id, trans_id, item_id, repo_id, action, reason, done)
               VALUES (null, ?, ?, ?, ?, ?, ?)""",
            (self.trans_id, self.item.id, get_repo_id(self.conn, self.repoid),
             int(self.action), int(self.reason), int(self.done)))
        self.id = self.conn.last_insert_row_id()

    def _db_update(self):
        self.conn.execute(
            """UPDATE trans_item
               SET trans_id = ?, item_id = ?, repo_id = ?, action = ?, reason = ?, done = ?
               WHERE id = ?""",
            (self.trans_id, self.item.id, get_repo_id(self.conn, self.repoid),
             int(self.action), int(self.reason), int(self.done), self.id))
