# -*- coding: utf-8 -*-
from . import mirakl_offer
from . import mirakl_sync_log
from . import product_template
from . import mirakl_sync_service
