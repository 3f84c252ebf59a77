# -*- coding: utf-8 -*-
import logging

from . import models

_logger = logging.getLogger(__name__)


def post_init_hook(env):
    _logger.info("Mirakl Sync module installed successfully!")


def uninstall_hook(env):
    _logger.info("Mirakl Sync module uninstalled")
