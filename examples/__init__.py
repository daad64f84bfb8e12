"""
anykey examples.

Each example runs offline and can be started as a module::

    python -m examples.multikey
"""
