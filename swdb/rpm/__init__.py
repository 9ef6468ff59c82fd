# __init__.py
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

import collections


class Nevra(collections.namedtuple('Nevra', 'name epoch version release arch')):
    # :api

    __slots__ = ()

    @property
    def evr(self):
        if self.epoch:
            return "%d:%s-%s" % (self.epoch, self.version, self.release)
        return "%s-%s" % (self.version, self.release)

    def __str__(self):
        return "%s-%s.%s" % (self.name, self.evr, self.arch)


def split_nevra(nevra):
    # :api
    """Split a 'name-[epoch:]version-release.arch' string into a Nevra.

    The '.rpm' suffix and the 'epoch:name-version-release.arch' notation are
    accepted as well. A missing epoch means epoch 0. Returns None if the string
    is not a full NEVRA.
    """
    if nevra.endswith('.rpm'):
        nevra = nevra[:-4]

    arch_index = nevra.rfind('.')
    if arch_index == -1:
        return None
    arch = nevra[arch_index + 1:]

    rel_index = nevra[:arch_index].rfind('-')
    if rel_index == -1:
        return None
    release = nevra[rel_index + 1:arch_index]

    ver_index = nevra[:rel_index].rfind('-')
    if ver_index == -1:
        return None
    version = nevra[ver_index + 1:rel_index]
    name = nevra[:ver_index]

    epoch = ''
    if ':' in version:
        epoch, _sep, version = version.partition(':')
    elif ':' in name:
        epoch, _sep, name = name.partition(':')

    if not (name and version and release and arch):
        return None
    if ':' in name or ':' in version:
        return None
    if epoch and not epoch.isdigit():
        return None
    return Nevra(name, int(epoch or 0), version, release, arch)
