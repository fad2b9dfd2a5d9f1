class DeploymentServiceException(Exception):
    pass


class ArtifactNotFoundException(DeploymentServiceException):
    pass


class ContractDeploymentException(DeploymentServiceException):
    pass
