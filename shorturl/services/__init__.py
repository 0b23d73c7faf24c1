"""
Services module for business logic separation.

Code generation, counter and record stores, reachability checking and the
shortening service that ties them together. Nothing here knows about HTTP.
"""
