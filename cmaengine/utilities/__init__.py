"""utilities of `cmaengine` not specific to the optimization algorithm"""
