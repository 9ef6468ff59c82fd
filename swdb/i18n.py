# i18n.py
#
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

import gettext
import locale

"""
Centralize i18n stuff here. Must be unittested.
"""


def _guess_encoding():
    """ Take the best shot at the current system's string encoding. """
    encoding = locale.getpreferredencoding(False)
    return 'utf-8' if encoding.startswith("ANSI") else encoding


def ucd(obj):
    """ Like the builtin str() but decodes bytes with a reasonable encoding. """
    if isinstance(obj, bytes):
        return str(obj, _guess_encoding(), errors='ignore')
    elif isinstance(obj, str):
        return obj
    return str(obj)


def translation(name):
    """ Easy gettext translations setup based on given domain name """

    def ucd_wrapper(fnc):
        return lambda *w: ucd(fnc(*w))
    t = gettext.translation(name, fallback=True)
    return map(ucd_wrapper, (t.gettext, t.ngettext))


def pgettext(context, message):
    result = _(context + chr(4) + message)
    if "\004" in result:
        return message
    else:
        return result

# setup translations
_, P_ = translation("swdb")
C_ = pgettext
