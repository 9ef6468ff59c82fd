# -*- coding: utf-8 -*-

# Copyright (C) 2012-2018 Red Hat, Inc.
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

from swdb.db.history import SwdbInterface
from swdb.db.types import CompsPackageType, TransactionItemAction, TransactionItemReason

import swdb.exceptions
import swdb.util

import tests.support
from tests.support import MockPackage, mock


class _HistoryTestCase(tests.support.TestCase):

    def setUp(self):
        patcher = mock.patch("swdb.util.getloginuid", return_value=1000)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.persistdir = tests.support.mkdtemp()
        self.history = SwdbInterface(self.persistdir, releasever="26")

    def tearDown(self):
        self.history.close()
        swdb.util.rm_rf(self.persistdir)

    def _finish(self, rpmdb="rpmdb"):
        self.history.beg(rpmdb)
        self.history.end(rpmdb, 0)


class RPMTransactionTest(_HistoryTestCase):

    def test_upgrade(self):
        new = MockPackage("foo-2.0-1.noarch", "updates")
        old = MockPackage("foo-1.0-1.noarch", "main")
        obs = MockPackage("foo-compat-1.0-1.noarch", "main")
        ti_new = self.history.rpm.add_upgrade(new, old, obsoleted=[obs])

        self.assertLength(self.history.rpm, 3)
        self.assertEqual(self.history.rpm.install_set, set([new]))
        self.assertEqual(self.history.rpm.remove_set, set([old, obs]))

        upgraded = [ti for ti in self.history.rpm if ti.action == TransactionItemAction.UPGRADED]
        self.assertLength(upgraded, 1)
        self.assertEqual(str(upgraded[0]), "foo-1.0-1.noarch")
        self.assertIs(upgraded[0].replaced_by, ti_new)
        self.assertEqual(upgraded[0].repoid, "main")
        obsoleted = [ti for ti in self.history.rpm
                     if ti.action == TransactionItemAction.OBSOLETED]
        self.assertEqual(str(obsoleted[0]), "foo-compat-1.0-1.noarch")
        self.assertIs(obsoleted[0].replaced_by, ti_new)

    def test_replaced_by_stored(self):
        new = MockPackage("foo-2.0-1.noarch", "updates")
        old = MockPackage("foo-1.0-1.noarch", "main")
        self.history.rpm.add_upgrade(new, old)
        self._finish()

        packages = self.history.last().packages()
        self.assertEqual([p.action for p in packages],
                         [TransactionItemAction.UPGRADE, TransactionItemAction.UPGRADED])
        self.assertEqual(str(packages[1].replaced_by), "foo-2.0-1.noarch")
        self.assertIsNone(packages[0].replaced_by)

    def test_remove_set_reinstall(self):
        new = MockPackage("foo-1.0-1.noarch", "main")
        old = MockPackage("foo-1.0-1.noarch", "main")
        self.history.rpm.add_reinstall(new, old)
        self.assertEqual(self.history.rpm.remove_set, set([old]))
        self.assertEqual(self.history.rpm.install_set, set([new]))

    def test_forced_repoid(self):
        pkg = MockPackage("foo-1.0-1.noarch", "@commandline")
        pkg._force_swdb_repoid = "main"
        self.history.rpm.add_install(pkg)
        tsi = next(iter(self.history.rpm))
        self.assertEqual(tsi.from_repo, "main")
        self.assertEqual(tsi.reason, TransactionItemReason.USER)

    def test_missing_package(self):
        rpm_item = self.history.pkg_to_swdb_rpm_item(MockPackage("foo-1.0-1.noarch"))
        self.history.swdb.add_item(rpm_item, "main", TransactionItemAction.INSTALL,
                                   TransactionItemReason.USER)
        self.assertEqual(self.history.rpm.remove_set, set())
        with self.assertRaises(swdb.exceptions.Error):
            self.history.rpm.install_set

    def test_reason(self):
        pkg = MockPackage("bash-4.4-1.x86_64", "main")
        self.history.rpm.add_install(pkg, reason=TransactionItemReason.DEPENDENCY)
        self._finish()
        self.assertEqual(self.history.rpm.get_reason(pkg), TransactionItemReason.DEPENDENCY)
        self.assertEqual(self.history.rpm.get_reason_name(pkg), "dependency")

        self.history.rpm.add_remove(pkg)
        self._finish()
        self.assertEqual(self.history.rpm.get_reason_name(pkg), "unknown")


class GroupPersistorTest(_HistoryTestCase):

    def _install_core(self):
        group = self.history.group.new("core", "Core", "Jádro", CompsPackageType.DEFAULT)
        group.add_package("bash", True, CompsPackageType.MANDATORY)
        group.add_package("zsh", False, CompsPackageType.OPTIONAL)
        self.history.group.install(group)
        self.history.rpm.add_install(MockPackage("bash-4.4-1.x86_64", "main"),
                                     reason=TransactionItemReason.GROUP)
        for tsi in self.history.rpm:
            tsi.done = True
        self._finish()
        self.history.close()

    def test_install(self):
        self._install_core()
        group = self.history.group.get("core")
        self.assertEqual(group.name, "Core")
        self.assertEqual(group.translated_name, "Jádro")
        self.assertEqual(group.package_types, CompsPackageType.DEFAULT)
        self.assertEqual([p.name for p in group.get_packages()], ["bash", "zsh"])
        self.assertEqual(self.history.group.get_package_groups("bash"), ["core"])
        self.assertEqual(self.history.group.get_package_groups("zsh"), [])
        self.assertIsNone(self.history.group.get("base"))

    def test_search_by_pattern(self):
        self._install_core()
        found = self.history.group.search_by_pattern("JÁD*")
        self.assertEqual([str(ti.get_comps_group_item()) for ti in found], ["core"])
        self.assertEmpty(self.history.group.search_by_pattern("base"))

    def test_is_removable_pkg(self):
        self._install_core()
        self.assertFalse(self.history.group.is_removable_pkg("bash"))

        group = self.history.group.get("core")
        self.history.group.remove(group)
        self.assertLength(self.history.group, 1)
        self.assertEqual([ti.action for ti in self.history.group],
                         [TransactionItemAction.REMOVE])
        self.assertTrue(self.history.group.is_removable_pkg("bash"))
        # not installed by the group
        self.assertFalse(self.history.group.is_removable_pkg("zsh"))

    def test_removed_group_not_listed(self):
        self._install_core()
        self.history.group.remove(self.history.group.get("core"))
        self._finish()
        self.assertEqual(self.history.group.get_package_groups("bash"), [])


class EnvironmentPersistorTest(_HistoryTestCase):

    def _install_env(self):
        group = self.history.group.new("core", "Core", None, CompsPackageType.DEFAULT)
        self.history.group.install(group)
        env = self.history.env.new("minimal", "Minimal Install", None,
                                   CompsPackageType.DEFAULT)
        env.add_group("core", True, CompsPackageType.MANDATORY)
        self.history.env.install(env)
        self._finish()
        self.history.close()

    def test_install(self):
        self._install_env()
        env = self.history.env.get("minimal")
        self.assertEqual(env.name, "Minimal Install")
        self.assertEqual([g.group_id for g in env.get_groups()], ["core"])
        self.assertEqual(self.history.env.get_group_environments("core"), ["minimal"])
        self.assertEqual([str(ti.get_comps_environment_item())
                          for ti in self.history.env.search_by_pattern("min*")],
                         ["minimal"])

    def test_is_removable_group(self):
        self._install_env()
        self.assertFalse(self.history.env.is_removable_group("core"))
        self.assertFalse(self.history.env.is_removable_group("base"))

        self.history.env.remove(self.history.env.get("minimal"))
        self.assertTrue(self.history.env.is_removable_group("core"))
