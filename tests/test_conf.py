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

import os

from swdb.conf import SwdbConf

import swdb.const
import swdb.exceptions
import swdb.util

import tests.support


class SwdbConfTest(tests.support.TestCase):

    def setUp(self):
        self.tmpdir = tests.support.mkdtemp()
        self.conf_file = os.path.join(self.tmpdir, "swdb.conf")

    def tearDown(self):
        swdb.util.rm_rf(self.tmpdir)

    def _write(self, text):
        with open(self.conf_file, "w") as f:
            f.write(text)

    def test_defaults(self):
        conf = SwdbConf()
        self.assertEqual(conf.persistdir, swdb.const.PERSISTDIR)
        self.assertEqual(conf.releasever, "")
        self.assertEqual(conf.db_path, "/var/lib/dnf/history.sqlite")
        self.assertEqual(conf.legacy_dir, "/var/lib/dnf")

    def test_read(self):
        self._write("[main]\npersistdir = /srv/dnf/\nreleasever = 27\ndebuglevel = 6\n"
                    "color = always\n")
        conf = SwdbConf().read(self.conf_file)
        self.assertEqual(conf.config_file_path, self.conf_file)
        self.assertEqual(conf.persistdir, "/srv/dnf")
        self.assertEqual(conf.releasever, "27")
        self.assertEqual(conf.debuglevel, 6)
        self.assertEqual(conf.db_path, "/srv/dnf/history.sqlite")

    def test_overrides_win(self):
        self._write("[main]\nreleasever = 27\n")
        conf = SwdbConf(releasever="28").read(self.conf_file)
        self.assertEqual(conf.releasever, "28")

    def test_no_main_section(self):
        self._write("[other]\nreleasever = 27\n")
        conf = SwdbConf().read(self.conf_file)
        self.assertEqual(conf.releasever, "")

    def test_errors(self):
        with self.assertRaises(swdb.exceptions.ConfigError):
            SwdbConf(colour="always")
        with self.assertRaises(swdb.exceptions.ConfigError):
            SwdbConf(persistdir="relative/dir")
        with self.assertRaises(swdb.exceptions.ConfigError):
            SwdbConf().read(tests.support.NONEXISTENT_FILE)

        self._write("[main]\ndebuglevel = 11\n")
        with self.assertRaises(swdb.exceptions.ConfigError) as ctx:
            SwdbConf().read(self.conf_file)
        self.assertIsNotNone(ctx.exception.raw_error)

        self._write("garbage")
        self.assertRaises(swdb.exceptions.ConfigError, SwdbConf().read, self.conf_file)
