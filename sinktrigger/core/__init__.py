"""
Decision core: graph construction, cycle detection, pipeline evaluation,
fingerprinting and identifier maintenance.
"""
