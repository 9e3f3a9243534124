"""
Rupantor volunteer-organization backend.

A FastAPI service exposing event listing/registration, task instructions for
volunteers and a polling-based internal chat, all stored in a generic
key-value store and authenticated through an external identity provider.
"""
