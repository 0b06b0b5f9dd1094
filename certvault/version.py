# Initialize version as unknown
version = "?"

try:
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as get_version

    version = get_version("certvault")
except PackageNotFoundError:
    print(
        "Cannot determine certvault version. "
        'If running from source you should at least run "pip install -e ."'
    )

BANNER = "certvault v{} - Vault PKI certificate client\n".format(version)
