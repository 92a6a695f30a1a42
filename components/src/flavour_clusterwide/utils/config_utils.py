# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Helpers for CLI flags that fall back to FCW_* environment variables."""

import os
from typing import Any, Callable, Optional


def add_argument(
    parser,
    *,
    flag_name: str,
    env_var: str,
    default: Any,
    help: str,
    arg_type: Optional[Callable[[str], Any]] = str,
    **kwargs: Any,
) -> None:
    """
    Add a CLI argument whose default can be overridden by an env var.

    A set env var becomes the argparse default as a raw string. argparse runs
    string defaults through ``type`` like any command-line value, so the
    conversion and its error message are the same for both sources.

    Args:
        parser: ArgumentParser or argument group
        flag_name: Primary flag (must start with '--', e.g., "--label-name")
        env_var: Environment variable name (e.g., "FCW_LABEL_NAME")
        default: Default value when neither the flag nor env var is given
        help: Help text
        arg_type: Conversion for flag and env values (default: str)
    """
    dest = kwargs.pop("dest", None) or flag_name.lstrip("-").replace("-", "_")

    kwargs.update(
        dest=dest,
        default=os.environ.get(env_var, default),
        help=f"{help}\nenv var: {env_var} | default: {default}",
    )
    if arg_type is not None:
        kwargs["type"] = arg_type

    parser.add_argument(flag_name, **kwargs)
