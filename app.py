#!/usr/bin/env python3
"""
Agreement PDF Generator CDK App
Renders accepted agreements to PDF from a queue and stores them in S3.
"""

import aws_cdk as cdk

from infrastructure.stacks.agreement_pdf_stack import AgreementPdfStack

# Configuration
from infrastructure.config.environments import get_environment_config

app = cdk.App()

# Get environment configuration
environment = app.node.try_get_context("environment") or "dev"
config = get_environment_config(environment)

# CDK environment (account/region)
cdk_env = cdk.Environment(account=config.get("account_id"), region=config.get("region", "eu-west-2"))

stack_prefix = f"AgreementsPdf-{environment}"

agreement_pdf_stack = AgreementPdfStack(
    app,
    f"{stack_prefix}-Generator",
    environment=environment,
    config=config,
    env=cdk_env,
)

# Apply common tags
cdk.Tags.of(app).add("Environment", environment)
cdk.Tags.of(app).add("ManagedBy", "CDK")
for key, value in (config.get("tags") or {}).items():
    cdk.Tags.of(agreement_pdf_stack).add(key, value)

app.synth()
