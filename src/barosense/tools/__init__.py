"""Command-line reader and opt-in debug instrumentation.

:mod:`reader` is the ``barosense-read`` entry point; :mod:`debug` provides
the ``BAROSENSE_DEBUG`` timing hooks used around bus transfers.
"""
