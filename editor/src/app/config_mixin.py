"""Configuration management for ProfileFrameEditor"""

import json
import logging
import os

from utils.path_resolver import get_config_dir

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
	'last_open_dir': '',
	'last_save_dir': '',
	'template_path': '',
	'start_mode': 'gallery',  # 'gallery' or 'camera'
}


class ConfigMixin:
	"""Configuration file operations (directories, template override, start mode)"""
	
	def _init_config(self, config_dir=None):
		"""Set config paths and load settings"""
		self.config_dir = str(config_dir or get_config_dir())
		self.config_file = os.path.join(self.config_dir, "config.json")
		self.config = dict(DEFAULT_CONFIG)
		self._load_config()
	
	def _load_config(self):
		"""Load settings from config file, falling back to defaults"""
		if not os.path.exists(self.config_file):
			return
		try:
			with open(self.config_file, 'r', encoding='utf-8') as f:
				stored = json.load(f)
		except (OSError, ValueError) as e:
			logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
			return
		if not isinstance(stored, dict):
			logger.warning("Ignoring malformed config %s", self.config_file)
			return
		# Only keep known keys so stale settings don't leak in
		for key in DEFAULT_CONFIG:
			if key in stored:
				self.config[key] = stored[key]
		if self.config['start_mode'] not in ('gallery', 'camera'):
			self.config['start_mode'] = DEFAULT_CONFIG['start_mode']
	
	def _save_config(self):
		"""Save settings to config file"""
		try:
			os.makedirs(self.config_dir, exist_ok=True)
			with open(self.config_file, 'w', encoding='utf-8') as f:
				json.dump(self.config, f, indent=2)
		except OSError as e:
			logger.warning("Could not save config %s: %s", self.config_file, e)
	
	def _remember_dir(self, key, path):
		"""Store the directory of path under key ('last_open_dir' / 'last_save_dir')"""
		directory = path if os.path.isdir(path) else os.path.dirname(path)
		if directory and self.config.get(key) != directory:
			self.config[key] = directory
			self._save_config()
