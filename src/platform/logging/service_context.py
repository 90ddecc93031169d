"""
Service identification prefix for log lines.

Format: ``{service}@{environment}:{instance}`` so lines from several workers or
containers can be told apart once aggregated.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'checkout')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostname when running in a cluster, PID otherwise
    instance = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance}'
