"""State layer.

Pure reconciliation, trail, geocode-cache and selection logic. Nothing in
this package performs network I/O except through the lookup callable handed
to :class:`pyfleetview.state.geocode.GeocodeCache`.
"""
