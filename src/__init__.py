"""OpenShift Cluster Reclaimer - orphaned OpenStack resource cleanup by cluster signature."""

__version__ = "0.4.0"
