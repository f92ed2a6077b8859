#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for running headline_poller as a module.
Allows execution via: python -m headline_poller
"""

from headline_poller import run_cli

if __name__ == "__main__":
    run_cli()
