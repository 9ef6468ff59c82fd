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


from swdb.db.types import (BACKWARD_ACTIONS, FORWARD_ACTIONS, ItemType,
                           TransactionItemAction, TransactionItemReason, reason_to_string)
from swdb.i18n import _

import swdb.exceptions


class _CompsPersistor(object):
    """Groups or environments changed by the transaction being recorded.

    Every change is added to the history right away as a finished USER item.
    Subclasses tell how items are created and looked up and what their
    members are.
    """

    _ITEM_TYPE = None

    def __init__(self, history):
        self.history = history
        # obj_id -> (item, action)
        self._changes = {}

    def __iter__(self):
        return iter([ti for ti in self.history.swdb.get_items()
                     if ti.item.item_type == self._ITEM_TYPE])

    def __len__(self):
        return len(self._changes)

    def _record(self, item, action):
        db = self.history._ensure_transaction()
        ti = db.add_item(item, "", action, TransactionItemReason.USER)
        ti.done = True
        self._changes[item.obj_id] = (item, action)
        return ti

    def install(self, item):
        return self._record(item, TransactionItemAction.INSTALL)

    def remove(self, item):
        return self._record(item, TransactionItemAction.REMOVE)

    def upgrade(self, item):
        return self._record(item, TransactionItemAction.UPGRADE)

    def new(self, obj_id, name, translated_name, pkg_types):
        item = self._create_item()
        item.obj_id = obj_id
        item.name = name or ""
        item.translated_name = translated_name or ""
        item.package_types = pkg_types
        return item

    def get(self, obj_id):
        """Latest recorded state of obj_id, None if it was never recorded."""
        ti = self._latest(obj_id)
        return None if ti is None else ti.item

    def _is_released(self, member_id, holders):
        """True if no holder keeps member_id installed after the recorded changes."""
        holders = set(holders)
        for obj_id, (item, action) in self._changes.items():
            if (member_id, True) not in self._members(item):
                continue
            if action == TransactionItemAction.REMOVE:
                holders.discard(obj_id)
            elif action == TransactionItemAction.INSTALL:
                holders.add(obj_id)
        return not holders

    def _create_item(self):
        raise NotImplementedError

    def _latest(self, obj_id):
        raise NotImplementedError

    @staticmethod
    def _members(item):
        """(member id, installed) pairs of item."""
        raise NotImplementedError


class GroupPersistor(_CompsPersistor):

    _ITEM_TYPE = ItemType.GROUP

    def _create_item(self):
        return self.history.swdb.create_comps_group_item()

    def _latest(self, obj_id):
        return self.history.swdb.get_comps_group_item(obj_id)

    @staticmethod
    def _members(item):
        return [(pkg.name, bool(pkg.installed)) for pkg in item.get_packages()]

    def search_by_pattern(self, pattern):
        return self.history.swdb.get_comps_group_items_by_pattern(pattern)

    def get_package_groups(self, pkg_name):
        return self.history.swdb.get_package_comps_groups(pkg_name)

    def is_removable_pkg(self, pkg_name):
        # only packages pulled in by groups are removed with them
        reason = self.history.swdb.resolve_rpm_transaction_item_reason(pkg_name, "", -1)
        if reason != TransactionItemReason.GROUP:
            return False
        return self._is_released(pkg_name, self.get_package_groups(pkg_name))


class EnvironmentPersistor(_CompsPersistor):

    _ITEM_TYPE = ItemType.ENVIRONMENT

    def _create_item(self):
        return self.history.swdb.create_comps_environment_item()

    def _latest(self, obj_id):
        return self.history.swdb.get_comps_environment_item(obj_id)

    @staticmethod
    def _members(item):
        return [(group.group_id, bool(group.installed)) for group in item.get_groups()]

    def search_by_pattern(self, pattern):
        return self.history.swdb.get_comps_environment_items_by_pattern(pattern)

    def get_group_environments(self, group_id):
        return self.history.swdb.get_comps_group_environments(group_id)

    def is_removable_group(self, group_id):
        if self.history.group.get(group_id) is None:
            return False
        return self._is_released(group_id, self.get_group_environments(group_id))


class RPMTransaction(object):
    """RPM items of the transaction being recorded.

    Remembers the caller's package object behind every item it adds, so
    install_set and remove_set hand back what the caller put in.
    """

    def __init__(self, history):
        self.history = history
        self._packages = {}

    def __iter__(self):
        # :api
        return iter([ti for ti in self.history.swdb.get_items()
                     if ti.item.item_type == ItemType.RPM])

    def __len__(self):
        return len(list(iter(self)))

    def _add(self, pkg, action, reason=None, replaced_by=None):
        db = self.history._ensure_transaction()
        if reason is None:
            reason = self.get_reason(pkg)
        repoid = getattr(pkg, "_force_swdb_repoid", None) or pkg.reponame or ""
        ti = db.add_item(self.history.pkg_to_swdb_rpm_item(pkg), repoid, action, reason)
        ti.replaced_by = replaced_by
        self._packages[ti] = pkg
        return ti

    def _add_replacement(self, new, action, old=None, old_action=None, obsoleted=None,
                         reason=None):
        ti_new = self._add(new, action, reason)
        if old is not None:
            self._add(old, old_action, replaced_by=ti_new)
        for pkg in obsoleted or ():
            self._add(pkg, TransactionItemAction.OBSOLETED, replaced_by=ti_new)
        return ti_new

    def add_install(self, new, obsoleted=None, reason=None):
        return self._add_replacement(new, TransactionItemAction.INSTALL, obsoleted=obsoleted,
                                     reason=reason or TransactionItemReason.USER)

    def add_upgrade(self, new, old, obsoleted=None):
        return self._add_replacement(new, TransactionItemAction.UPGRADE, old,
                                     TransactionItemAction.UPGRADED, obsoleted)

    def add_downgrade(self, new, old, obsoleted=None):
        return self._add_replacement(new, TransactionItemAction.DOWNGRADE, old,
                                     TransactionItemAction.DOWNGRADED, obsoleted)

    def add_reinstall(self, new, old, obsoleted=None):
        return self._add_replacement(new, TransactionItemAction.REINSTALL, old,
                                     TransactionItemAction.REINSTALLED, obsoleted)

    def add_remove(self, old, reason=None):
        return self._add(old, TransactionItemAction.REMOVE,
                         reason or TransactionItemReason.USER)

    def _package_set(self, actions):
        result = set()
        for ti in self:
            if ti.action not in actions:
                continue
            if ti not in self._packages:
                raise swdb.exceptions.Error(
                    _("Transaction item has no package attached: %s") % ti)
            result.add(self._packages[ti])
        return result

    @property
    def install_set(self):
        # :api
        return self._package_set(FORWARD_ACTIONS)

    @property
    def remove_set(self):
        # :api
        return self._package_set(BACKWARD_ACTIONS + [TransactionItemAction.REINSTALLED])

    def get_reason(self, pkg):
        return self.history.swdb.resolve_rpm_transaction_item_reason(pkg.name, pkg.arch, -1)

    def get_reason_name(self, pkg):
        return reason_to_string(self.get_reason(pkg))
