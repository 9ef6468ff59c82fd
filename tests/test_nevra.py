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

import swdb.rpm

import tests.support


class SplitNevraTest(tests.support.TestCase):

    def test_without_epoch(self):
        nevra = swdb.rpm.split_nevra("foo-1.0-1.fc26.x86_64")
        self.assertEqual(nevra, ("foo", 0, "1.0", "1.fc26", "x86_64"))

    def test_epoch_in_version(self):
        nevra = swdb.rpm.split_nevra("foo-bar-2:1.0-1.noarch")
        self.assertEqual(nevra.name, "foo-bar")
        self.assertEqual(nevra.epoch, 2)
        self.assertEqual(nevra.version, "1.0")

    def test_epoch_in_front(self):
        nevra = swdb.rpm.split_nevra("3:foo-1.0-1.noarch")
        self.assertEqual(nevra, ("foo", 3, "1.0", "1", "noarch"))

    def test_rpm_suffix(self):
        nevra = swdb.rpm.split_nevra("foo-1.0-1.x86_64.rpm")
        self.assertEqual(nevra.arch, "x86_64")

    def test_incomplete(self):
        self.assertIsNone(swdb.rpm.split_nevra("foo"))
        self.assertIsNone(swdb.rpm.split_nevra("foo-1.0.x86_64"))
        self.assertIsNone(swdb.rpm.split_nevra("foo-a:1.0-1.noarch"))

    def test_str(self):
        self.assertEqual(str(swdb.rpm.split_nevra("foo-0:1.0-1.noarch")), "foo-1.0-1.noarch")
        self.assertEqual(str(swdb.rpm.split_nevra("foo-2:1.0-1.noarch")), "foo-2:1.0-1.noarch")
        self.assertEqual(swdb.rpm.split_nevra("foo-2:1.0-1.noarch").evr, "2:1.0-1")
