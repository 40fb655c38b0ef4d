"""HR back-office core package.

Organized by feature modules (leaves, attendance, requests, exits, ...) with a
thin Flask controller layer on top of service/repository layers. The services
hold the workflow and accounting rules; repositories only read and write.
"""
