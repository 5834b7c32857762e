"""
Provider Comparison Pipeline - benchcore/

Turns flat JMH benchmark results, measured under two crypto providers, into a
paired comparison tree for drill-down charting.

    benchcore/
    ├── algorithms.py     # Alias registry: PQC families, KDFs, ciphers, modes, paddings
    ├── records.py        # RawRecord / ClassifiedRecord / ComparisonEntity / Anomaly
    ├── classifier.py     # Ordered classification rules
    ├── matcher.py        # Provider pairing (join on classification key)
    ├── hierarchy.py      # Path-keyed comparison tree
    ├── formatters.py     # Display labels for the rendering layer
    ├── pipeline.py       # classify -> pair -> tree, once per load
    ├── jmh.py            # JMH JSON result loading
    ├── config.py         # CONFIG dict + env overrides
    ├── env_loader.py     # .benchenv loader
    ├── logging_utils.py  # JSON logging + anomaly counters
    └── cli.py            # Summary command
"""

__version__ = "0.1.0"
