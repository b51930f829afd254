"""GraphQL documents sent to the Railway public API."""

PROJECT_FIELDS = """
    id
    name
    services {
      edges {
        node {
          id
          name
        }
      }
    }
    environments {
      edges {
        node {
          id
          name
        }
      }
    }
"""

PROJECTS_QUERY = (
    """
query Projects {
  projects {
    edges {
      node {"""
    + PROJECT_FIELDS
    + """      }
    }
  }
}
"""
)

PROJECT_BY_ID_QUERY = (
    """
query Project($id: String!) {
  project(id: $id) {"""
    + PROJECT_FIELDS
    + """  }
}
"""
)

SERVICE_DEPLOYMENTS_QUERY = """
query ServiceDeployments($serviceId: String!, $environmentId: String) {
  deployments(
    first: 1
    input: { serviceId: $serviceId, environmentId: $environmentId }
  ) {
    edges {
      node {
        id
        status
        createdAt
      }
    }
  }
}
"""

DEPLOYMENT_RESTART_MUTATION = """
mutation DeploymentRestart($id: String!) {
  deploymentRestart(id: $id)
}
"""

DEPLOYMENT_REDEPLOY_MUTATION = """
mutation DeploymentRedeploy($id: String!) {
  deploymentRedeploy(id: $id) {
    id
    status
  }
}
"""

__all__ = [
    "DEPLOYMENT_REDEPLOY_MUTATION",
    "DEPLOYMENT_RESTART_MUTATION",
    "PROJECTS_QUERY",
    "PROJECT_BY_ID_QUERY",
    "SERVICE_DEPLOYMENTS_QUERY",
]
