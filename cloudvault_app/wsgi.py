# cloudvault_app/wsgi.py
# -*- coding: utf-8 -*-
from cloudvault_app import create_app

app = create_app()
