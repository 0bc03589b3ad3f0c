"""
CLI module for the EiriniX test harness.
Lets a developer render, apply, inspect and delete fixtures by hand.
"""

import logging
import json
import yaml
import click

from eirinix_testing.catalog.catalog import Catalog, DEFAULT_KIND_HOST, EIRINI_APP_NAME
from eirinix_testing.catalog.ports import get_free_port
from eirinix_testing.connection.connector import ClusterConnector
from eirinix_testing.errors import HarnessError, NotFoundError
from eirinix_testing.workload.app import EiriniApp

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def print_yaml(data):
    """Print data as YAML."""
    print(yaml.dump(data, default_flow_style=False))


def print_json(data, indent=2):
    """Print data as JSON."""
    print(json.dumps(data, indent=indent))


def print_result(ctx, data):
    if ctx.obj['output_format'] == 'json':
        print_json(data)
    else:
        print_yaml(data)


def fail(ctx, message):
    click.echo(message, err=True)
    ctx.exit(1)


@click.group()
@click.option(
    '--kubeconfig',
    type=click.Path(),
    help='Path to kubeconfig file (kubectl falls back to $KUBECONFIG, which may list several files)'
)
@click.option(
    '--context',
    help='Kubernetes context to use'
)
@click.option(
    '--namespace',
    default='default',
    help='Kubernetes namespace to use'
)
@click.option(
    '--kind-host',
    default=DEFAULT_KIND_HOST,
    help='Address at which the cluster reaches this machine'
)
@click.option(
    '--service-port',
    type=click.IntRange(1, 65535),
    help='Port of the EiriniX webhook server (a free port is picked if omitted)'
)
@click.option(
    '--output-format',
    type=click.Choice(['yaml', 'json']),
    default='yaml',
    help='Output format: yaml or json'
)
@click.pass_context
def cli(ctx, kubeconfig, context, namespace, kind_host, service_port, output_format):
    """
    Fixtures for EiriniX integration tests.

    Renders the manifests the tests use, applies them to a cluster and
    inspects or deletes the fake Eirini apps they create.
    """
    ctx.ensure_object(dict)

    ctx.obj['namespace'] = namespace
    ctx.obj['output_format'] = output_format

    try:
        catalog = Catalog(
            port_allocator=(lambda: service_port) if service_port else get_free_port,
            kind_host=kind_host,
            kubeconfig=kubeconfig,
        )
    except HarnessError as e:
        fail(ctx, f"Cannot build the fixture catalog: {e}")

    ctx.obj['catalog'] = catalog
    # Connects lazily, on the first kubectl call
    ctx.obj['connector'] = ClusterConnector(
        kubeconfig=kubeconfig,
        context=context,
    )


@cli.command()
@click.argument('kind', type=click.Choice(['service', 'app', 'staging']))
@click.pass_context
def manifest(ctx, kind):
    """
    Print one of the fixture manifests.
    """
    catalog = ctx.obj['catalog']
    builders = {
        'service': catalog.service_yaml,
        'app': catalog.eirini_app_yaml,
        'staging': catalog.eirini_staging_app_yaml,
    }
    click.echo(builders[kind]().decode('utf-8'))


@cli.command(name='manager-options')
@click.argument(
    'preset',
    type=click.Choice(['simple', 'integration', 'filtered', 'no-register', 'service'])
)
@click.option(
    '--filter/--no-filter',
    'filter_eirini_apps',
    default=True,
    help='For the filtered preset: only act on Eirini app pods'
)
@click.pass_context
def manager_options(ctx, preset, filter_eirini_apps):
    """
    Print the manager options of a preset.

    The filtered preset watches the --namespace given to the group.
    """
    catalog = ctx.obj['catalog']
    presets = {
        'simple': catalog.simple_manager,
        'integration': catalog.integration_manager,
        'filtered': lambda: catalog.integration_manager_filtered(
            filter_eirini_apps, ctx.obj['namespace']
        ),
        'no-register': catalog.integration_manager_no_register,
        'service': catalog.simple_manager_service,
    }
    print_result(ctx, presets[preset]().as_dict())


@cli.command(name='register-service')
@click.pass_context
def register_service(ctx):
    """
    Apply the EiriniX service and endpoints.
    """
    catalog = ctx.obj['catalog']
    click.echo(f"Registering EiriniX service at {catalog.kind_host}:{catalog.service_port}...")

    try:
        catalog.register_eirinix_service(ctx.obj['connector'])
    except HarnessError as e:
        fail(ctx, f"Failed to register service: {e}")

    print_result(ctx, {"success": True, "host": catalog.kind_host, "port": catalog.service_port})


@cli.command(name='start-app')
@click.option('--staging', is_flag=True, help='Start the staging pod instead of the app')
@click.pass_context
def start_app(ctx, staging):
    """
    Start a fake Eirini app in the namespace.
    """
    catalog = ctx.obj['catalog']
    connector = ctx.obj['connector']
    namespace = ctx.obj['namespace']

    try:
        if staging:
            app = catalog.start_eirini_staging_app_in_namespace(connector, namespace)
        else:
            app = catalog.start_eirini_app_in_namespace(connector, namespace)
    except HarnessError as e:
        fail(ctx, f"Failed to start app: {e}")

    click.echo(f"Started {app.namespace}/{app.name}")
    print_result(ctx, {"success": True, "name": app.name, "namespace": app.namespace})


@cli.command()
@click.argument('name', default=EIRINI_APP_NAME)
@click.pass_context
def status(ctx, name):
    """
    Show the status of a fake Eirini app.
    """
    app = EiriniApp(name=name, namespace=ctx.obj['namespace'], gateway=ctx.obj['connector'])

    try:
        running = app.is_running()
    except NotFoundError as e:
        fail(ctx, str(e))
    except HarnessError as e:
        fail(ctx, f"Failed to get status: {e}")

    print_result(ctx, {
        "name": app.name,
        "namespace": app.namespace,
        "phase": app.pod.phase,
        "running": running,
        "ready": app.pod.is_ready(),
        "restarts": app.pod.restarts(),
    })


@cli.command()
@click.argument('name', default=EIRINI_APP_NAME)
@click.pass_context
def delete(ctx, name):
    """
    Delete a fake Eirini app.
    """
    app = EiriniApp(name=name, namespace=ctx.obj['namespace'], gateway=ctx.obj['connector'])

    try:
        output = app.delete()
    except HarnessError as e:
        fail(ctx, f"Failed to delete {app.namespace}/{app.name}: {e}")

    print_result(ctx, {"success": True, "output": output.strip()})


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
