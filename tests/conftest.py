#!/usr/bin/env python
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""This configuration file adds the custom '--dataset' option for the tests."""

from pathlib import Path
import pytest
import common

def pytest_addoption(parser):
    """Add custom pytest options."""

    text = """This option specifies the dataset to use for emulation. By default, all datasets are
              used. Please, find the available datasets in the 'DATASETS' dictionary of the
              'common' module."""
    parser.addoption("-D", "--dataset", dest="dataset", default="all", help=text)

def pytest_generate_tests(metafunc):
    """Generate tests for every emulated system the test uses the 'dataset' fixture for."""

    if "dataset" not in metafunc.fixturenames:
        return

    dataset = metafunc.config.getoption("dataset")
    if dataset == "all":
        params = list(common.DATASETS)
    else:
        params = [dataset]

    metafunc.parametrize("dataset", params)

def pytest_configure(config):
    """Verify the existence of requested dataset."""

    dataset = config.getoption("dataset")
    if dataset != "all" and dataset not in common.DATASETS:
        raise pytest.exit(f"Did not find dataset '{dataset}'.")

@pytest.fixture(name="sysfs_root")
def fixture_sysfs_root(tmp_path: Path, dataset: str) -> Path:
    """Build the sysfs tree of emulated system 'dataset' and return its root directory."""
    return common.build_sysfs(tmp_path / "sysfs", common.DATASETS[dataset])
