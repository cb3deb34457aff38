"""
==========================================
Exceptions (:mod:`kibrary.exceptions`)
==========================================

Errors raised by Kibrary while assembling and solving the inverse problem.
None of them is meant to be retried: each one signals either a wrong
configuration, a data-preparation bug upstream, or an ill-posed system.
"""
from .exceptions import *
