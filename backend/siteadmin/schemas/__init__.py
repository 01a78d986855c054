# Schemas package init
"""
SiteAdmin Backend - API Contracts
=================================

requests.py:   shapes of incoming JSON bodies with declared fields
responses.py:  shapes of JSON responses (also drive the OpenAPI docs)

The save routes accept an arbitrary JSON document under one property; those
bodies are checked by siteadmin.validation instead of a model.
"""
