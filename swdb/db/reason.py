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
                           SUPERSEDED_ACTIONS, reason_priority)


class ReasonResolver(object):
    """Finds why a package is installed.

    Items of the transaction in progress win over the history. In the
    history only the latest relevant record of a completed transaction
    counts, removal makes the reason unknown.
    """

    _HISTORY_SQL = """
        SELECT
            ti.action AS action,
            ti.reason AS reason
        FROM
            trans_item ti
        JOIN
            trans t ON ti.trans_id = t.id
        JOIN
            rpm i USING (item_id)
        WHERE
            t.done = 1
            AND ti.action NOT IN (%s)
            AND i.name = ?
            AND i.arch = ?
        ORDER BY
            ti.trans_id DESC,
            ti.id DESC
        LIMIT 1
    """ % ", ".join(str(int(action)) for action in SUPERSEDED_ACTIONS)

    def __init__(self, conn):
        self.conn = conn

    def resolve(self, name, arch=None, max_transaction_id=None, transaction=None):
        # max_transaction_id is accepted for API compatibility, no bound is applied
        if transaction is not None:
            reason = self._resolve_in_transaction(transaction, name, arch)
            if reason is not None:
                return reason

        if arch:
            return self._resolve_arch(name, arch)

        result = TransactionItemReason.UNKNOWN
        for rpm_arch in self._list_arches(name):
            reason = self._resolve_arch(name, rpm_arch)
            if reason_priority(reason) > reason_priority(result):
                result = reason
        return result

    @staticmethod
    def _resolve_in_transaction(transaction, name, arch):
        for ti in transaction.get_items():
            item = ti.item
            if item is None or item.item_type != ItemType.RPM:
                continue
            if item.name != name:
                continue
            if arch and item.arch != arch:
                continue
            return ti.reason
        return None

    def _resolve_arch(self, name, arch):
        row = self.conn.select_one(self._HISTORY_SQL, (name, arch))
        if row is None:
            return TransactionItemReason.UNKNOWN
        if row['action'] == TransactionItemAction.REMOVE:
            return TransactionItemReason.UNKNOWN
        return TransactionItemReason(row['reason'])

    def _list_arches(self, name):
        rows = self.conn.select(
            "SELECT DISTINCT arch FROM rpm WHERE name = ? ORDER BY arch", (name,))
        return [row['arch'] for row in rows]
