#!/usr/bin/env python3

# Copyright (C) 2022-2023 The hdkeyring developers
#
# This file is part of hdkeyring. It is subject to the license terms in the
# LICENSE file found in the top-level directory of this distribution.
#
# No part of hdkeyring including this file, may be copied, modified, propagated,
# or distributed except according to the terms contained in the LICENSE file.

"__init__ module for the hdkeyring package."

name = "hdkeyring"
__version__ = "2023.7.1"
__author__ = "The hdkeyring developers"
__author_email__ = "devs@hdkeyring.org"
__copyright__ = "Copyright (C) 2022-2023 The hdkeyring developers"
__license__ = "MIT License"
