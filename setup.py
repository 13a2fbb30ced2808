from setuptools import setup, find_packages

install_requires = [
    'numpy>=1.24',
    'pandas>=2.0',
    'polars>=1.0',
    'scikit-learn>=1.2',
    'joblib>=1.2',
    'pyyaml>=6.0',
    'tqdm>=4.60',
]

setup(
    name='m6a-prediction',
    version='0.1.0',
    description='Feature encoding and inference pipeline for m6A (N6-methyladenosine) site prediction',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['m6a_prediction', 'm6a_prediction.*']),
    install_requires=install_requires,
    python_requires='>=3.9',

    extras_require={
        'dev': ['pytest', ],
    },
    entry_points={
        'console_scripts': [
            'm6a-predict=m6a_prediction.cli.predict_cli:main',
        ],
    },

    include_package_data=True,
    package_data={
        'm6a_prediction': ['data/*.csv'],
    },
)
