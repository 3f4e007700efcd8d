"""Schemas shared between the Code Corps API server and its clients."""
