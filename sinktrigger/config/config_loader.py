import yaml
from typing import Dict, Any, List, Optional
from croniter import croniter

from ..core.exceptions import TriggerConfigError
from ..core.models import TriggerConfig
from ..repository.base import JobRepository


# Option names as exposed on the trigger form, mapped to dataclass fields
OPTION_ALIASES = {
    'spec': 'spec',
    'rootProjectName': 'root_project_name',
    'sinkProjectName': 'sink_project_name',
    'excludedProjectNames': 'excluded_project_names',
    'ignoreNonSuccessfulUpstreamDependencyBuilds': 'ignore_non_successful_upstream_dependency_builds',
    'verbose': 'verbose',
}

BOOLEAN_FIELDS = ('ignore_non_successful_upstream_dependency_builds', 'verbose')


class TriggerConfigLoader:
    """Load and validate pipeline sink trigger configurations"""

    @staticmethod
    def load_from_yaml(file_path: str) -> TriggerConfig:
        """Load configuration from YAML file"""
        try:
            with open(file_path, 'r') as file:
                config_dict = yaml.safe_load(file)
        except yaml.YAMLError as e:
            raise TriggerConfigError(f"Invalid YAML in {file_path}: {e}") from e

        if config_dict is None:
            raise TriggerConfigError(f"Empty or invalid YAML file: {file_path}")

        return TriggerConfigLoader.load_from_dict(config_dict)

    @staticmethod
    def load_from_dict(config_dict: Dict[str, Any]) -> TriggerConfig:
        """Load configuration from dictionary; camelCase and snake_case keys are both accepted"""
        if not isinstance(config_dict, dict):
            raise TriggerConfigError(f"Trigger configuration must be a mapping, got {type(config_dict).__name__}")

        snake_names = set(OPTION_ALIASES.values())
        processed_config = {}
        for key, value in config_dict.items():
            field_name = OPTION_ALIASES.get(key, key)
            if field_name not in snake_names:
                raise TriggerConfigError(f"Unknown trigger option: {key}")
            processed_config[field_name] = value

        for required in ('spec', 'root_project_name', 'sink_project_name'):
            if required not in processed_config:
                raise TriggerConfigError(f"Missing required trigger option: {required}")

        for name in ('root_project_name', 'sink_project_name', 'excluded_project_names'):
            if processed_config.get(name) is None:
                processed_config[name] = ""
            else:
                processed_config[name] = str(processed_config[name])

        for name in BOOLEAN_FIELDS:
            value = processed_config.get(name, False)
            if not isinstance(value, bool):
                raise TriggerConfigError(f"Option {name} must be a boolean, got {value!r}")
            processed_config[name] = value

        return TriggerConfig(**processed_config)

    @staticmethod
    def config_to_dict(config: TriggerConfig) -> Dict[str, Any]:
        """Serialize using the option names of the trigger form"""
        fields = config.to_dict()
        return {alias: fields[field_name] for alias, field_name in OPTION_ALIASES.items()}

    @staticmethod
    def validate_config(config: TriggerConfig, repository: Optional[JobRepository] = None) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        if not config.spec or not config.spec.strip():
            issues.append("Schedule spec is required")
        elif not croniter.is_valid(config.spec):
            issues.append(f"Invalid schedule spec: '{config.spec}'")

        issues.extend(TriggerConfigLoader.validate_project_name(config.root_project_name, repository, 'Root'))
        issues.extend(TriggerConfigLoader.validate_project_name(config.sink_project_name, repository, 'Sink'))

        if config.excluded_project_names.strip():
            for name in config.exclusion_names():
                issues.extend(TriggerConfigLoader.validate_project_name(name, repository, 'Excluded'))

        return issues

    @staticmethod
    def validate_project_name(name: str, repository: Optional[JobRepository], role: str) -> List[str]:
        if not name or not name.strip():
            return [f"{role} project: no project specified"]
        if repository is not None and repository.find_by_name(name.strip()) is None:
            return [f"{role} project: no such project '{name.strip()}'"]
        return []
