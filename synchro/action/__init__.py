from .deploy import DeployReport, deploy_module, deploy_modules

__all__ = ["DeployReport", "deploy_module", "deploy_modules"]
