"""Time Reporting package.

Workers record a daily attendance window and split the worked time across
tasks. The package is organized by feature modules (attendance, time_logs,
combined, tasks) with a thin Flask controller layer on top of service and
repository layers.
"""
