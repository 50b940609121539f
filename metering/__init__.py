"""
Usage metering and tiered billing service
"""
