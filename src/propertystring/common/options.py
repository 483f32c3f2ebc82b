# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import os


log_dir = os.getenv("PROPERTYSTRING_LOG_DIR")
"""If not None, log.to_file() logs library activity to a file named
propertystring-<pid>.log in the specified directory, where <pid> is the return
value of os.getpid().
"""
