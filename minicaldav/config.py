import json
import logging
import os

"""
Reading connection parameters from a configuration file.

The file is JSON (or YAML, if pyyaml is installed) with one section
per server, i.e.

    {
        "default": {
            "caldav_url": "https://caldav.example.com/",
            "caldav_user": "tobixen",
            "caldav_pass": "hunter2"
        },
        "work": {
            "inherits": "default",
            "caldav_url": "https://caldav.example.com/work/"
        }
    }
"""

log = logging.getLogger(__name__)


def default_config_files():
    cfgdir = f"{os.environ.get('HOME', '/')}/.config"
    return (
        f"{cfgdir}/minicaldav/calendar.conf",
        f"{cfgdir}/minicaldav/calendar.yaml",
        f"{cfgdir}/minicaldav/calendar.json",
        f"{cfgdir}/calendar.conf",
        "/etc/minicaldav/calendar.conf",
    )


def config_section(config, section="default"):
    """
    Returns the section, with the settings of the section it
    inherits from (recursively) filled in.
    """
    return _config_section(config, section, set())


def _config_section(config, section, seen):
    if section in seen:
        log.error(f"config section {section} inherits from itself")
        return {}
    seen.add(section)
    if section in config and "inherits" in config[section]:
        ret = _config_section(config, config[section]["inherits"], seen)
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    ret.pop("inherits", None)
    return ret


def connection_params(section):
    """
    Maps the caldav_* keys of a config section to DAVClient parameters
    """
    conn_params = {}
    for k in section:
        if k.startswith("caldav_") and section[k]:
            key = k[7:]
            if key == "pass":
                key = "password"
            if key == "user":
                key = "username"
            conn_params[key] = section[k]
    return conn_params


def read_config(fn):
    """
    Reads a config file.  Without a file name, the default locations
    are tried in order.  Returns None if no config file was found,
    and an empty dict if the file could not be parsed.
    """
    if not fn:
        for config_file in default_config_files():
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        with open(fn, "rb") as config_file:
            raw = config_file.read()
    except FileNotFoundError:
        log.debug(f"no config file {fn}")
        return None

    try:
        cfg = json.loads(raw)
    except json.decoder.JSONDecodeError:
        cfg = _read_yaml(fn, raw)
    if not isinstance(cfg, dict):
        log.error(f"error in config file {fn}.  It will be ignored")
        return {}
    return cfg


def _read_yaml(fn, raw):
    ## Late import.  yaml is an external module, and not included in
    ## the requirements as for now.
    try:
        import yaml
    except ImportError:
        log.error(
            f"config file {fn} exists but is not valid json, and pyyaml is not installed."
        )
        return {}

    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        log.error(
            f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
        )
        return {}
